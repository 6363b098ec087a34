"""
roomchat.services.chat_room_controller
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

房间注册表与分配策略 —— 进程内唯一的房间调度器。

在 FastAPI lifespan 中创建一次并挂载于 ``app.state``，关闭时清空。

- ``add_user_to_valid_chat_room(user, capacity)`` → 分配到有空位的房间（没有则新建）
- ``remove_user(user)``                           → 释放用户当前所在房间的名额
- ``list_rooms()``                                → 列出所有活跃房间

分配策略：按创建先后扫描，选第一个容量匹配且未满的房间（最早创建者优先）。
房间成员清空时立即从注册表移除。
"""
from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from roomchat.core.exceptions import MembershipInconsistencyError
from roomchat.core.logging import get_logger
from roomchat.schemas.chat_room import RoomInfoData
from roomchat.services.chat_room import ChatRoom
from roomchat.services.user import User

logger = get_logger(__name__)


def is_valid_capacity(capacity: object) -> bool:
    """容量必须是正整数（``bool`` 不算）。"""
    return isinstance(capacity, int) and not isinstance(capacity, bool) and capacity > 0


class ChatRoomController:
    """进程内的房间注册表。

    注册表只能通过本类的方法修改。所有方法都不包含 ``await``，
    在单个事件循环内每次连接/断开的处理都是原子的，因此不需要加锁。
    """

    def __init__(self) -> None:
        # dict 保持插入顺序，即房间创建顺序
        self._rooms: dict[str, ChatRoom] = {}

    @property
    def rooms(self) -> Mapping[str, ChatRoom]:
        """注册表的只读视图。"""
        return MappingProxyType(self._rooms)

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def get_room(self, room_id: str | None) -> ChatRoom | None:
        """按 ID 查找房间，非法或不存在的 ID 返回 ``None``。"""
        if not ChatRoom.is_id_for_chat_room(room_id):
            return None
        return self._rooms.get(room_id)

    def list_rooms(self) -> list[RoomInfoData]:
        """按创建顺序列出所有活跃房间的摘要信息。"""
        return [room.info() for room in self._rooms.values()]

    # ── 分配 ──────────────────────────────────────────────────────────

    def add_user_to_valid_chat_room(self, user: User, capacity: int) -> ChatRoom | None:
        """为用户找到（或创建）一个指定容量且有空位的房间并加入。

        Args:
            user: 待分配的用户。
            capacity: 房间容量，必须为正整数。

        Returns:
            用户加入的房间；``capacity`` 非法时返回 ``None``，不创建任何房间。

        Raises:
            MembershipInconsistencyError: 选中的房间无法接纳该用户。
        """
        if not is_valid_capacity(capacity):
            logger.warning("拒绝分配房间，容量非法 | user=%s | capacity=%r", user.id, capacity)
            return None

        current = self.get_room(user.room_id)
        if current is not None and current.capacity == capacity and current.has_member(user.id):
            return current

        self.remove_user(user)

        room = self._find_room_with_free_slot(capacity)
        if room is None:
            room = self._create_room(capacity)

        if not room.add_user(user):
            raise MembershipInconsistencyError(
                f"房间 {room.id} 有空位但无法加入用户 {user.id}",
            )
        logger.info(
            "用户已分配房间 | user=%s | room=%s | %d/%d",
            user.id, room.id, room.member_count, room.capacity,
        )
        return room

    def remove_user(self, user: User) -> bool:
        """释放用户当前所在房间的名额。

        Returns:
            用户确实从某个房间移除时返回 ``True``；
            用户不在任何房间，或记录的房间已回收、不含该用户时返回 ``False``
            （后两种情况会清除用户自身的房间记录）。
        """
        if not user.is_in_chat_room():
            return False
        room = self._rooms.get(user.room_id)
        if room is None or not room.has_member(user.id):
            logger.warning("用户记录的房间不含该用户 | user=%s | room=%s", user.id, user.room_id)
            user.leave_chat_room()
            return False
        return room.remove_user(user)

    def _find_room_with_free_slot(self, capacity: int) -> ChatRoom | None:
        for room in self._rooms.values():
            if room.capacity == capacity and not room.is_full:
                return room
        return None

    def _create_room(self, capacity: int) -> ChatRoom:
        room = ChatRoom.create(capacity, on_empty=self._retire_room)
        self._rooms[room.id] = room
        logger.info("房间已创建 | room=%s | capacity=%d", room.id, capacity)
        return room

    def _retire_room(self, room: ChatRoom) -> None:
        """成员清空的房间立即从注册表移除。"""
        if self._rooms.get(room.id) is room:
            del self._rooms[room.id]
            logger.info("房间已回收 | room=%s", room.id)

    # ── 生命周期 ──────────────────────────────────────────────────────

    def clear(self) -> None:
        """丢弃所有房间。应在应用关闭时调用。"""
        count = len(self._rooms)
        self._rooms.clear()
        logger.info("房间注册表已清空 | 共 %d 个房间", count)
