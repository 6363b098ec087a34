"""
roomchat.services.chat_room
~~~~~~~~~~~~~~~~~~~~~~~~~~~

聊天室领域模型 —— 一组人数有上限的用户。

房间只保存成员的用户 ID，成员增减时同步更新用户自身记录的房间，
两侧状态始终一致。成员清空时通过 ``on_empty`` 回调通知注册表回收。
"""
from __future__ import annotations

import re
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from roomchat.core.exceptions import MembershipInconsistencyError
from roomchat.core.logging import get_logger
from roomchat.schemas.chat_room import RoomInfoData, RoomState

if TYPE_CHECKING:
    from roomchat.services.user import User

logger = get_logger(__name__)

_ROOM_ID_PREFIX: str = "chatroom-"
_ROOM_ID_PATTERN = re.compile(rf"^{_ROOM_ID_PREFIX}[0-9a-f]{{32}}$")


class ChatRoom:
    """一个人数有上限的聊天室。

    成员的加入/移除应通过 ``ChatRoomController`` 调度，
    由它保证用户离开旧房间后才进入新房间。

    Attributes:
        id: 房间唯一标识，格式为 ``chatroom-<32 位十六进制>``。
        capacity: 最大同时在线成员数。
        created_at: 创建时间（UTC）。
    """

    def __init__(
        self,
        room_id: str,
        capacity: int,
        on_empty: Callable[[ChatRoom], None] | None = None,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"房间容量必须为正整数: {capacity!r}")
        self.id = room_id
        self.capacity = capacity
        self.created_at = datetime.now(timezone.utc)
        self._members: set[str] = set()
        self._on_empty = on_empty

    # ── 房间 ID ──────────────────────────────────────────────────────

    @staticmethod
    def new_id() -> str:
        """生成一个新的房间 ID。"""
        return f"{_ROOM_ID_PREFIX}{uuid.uuid4().hex}"

    @staticmethod
    def is_id_for_chat_room(value: object) -> bool:
        """检查 ``value`` 是否为本服务签发格式的房间 ID。"""
        return isinstance(value, str) and _ROOM_ID_PATTERN.fullmatch(value) is not None

    @classmethod
    def create(
        cls,
        capacity: int,
        on_empty: Callable[[ChatRoom], None] | None = None,
    ) -> ChatRoom:
        """创建一个带新 ID 的空房间。"""
        return cls(cls.new_id(), capacity, on_empty=on_empty)

    # ── 容量查询 ──────────────────────────────────────────────────────

    @property
    def members(self) -> frozenset[str]:
        """当前成员用户 ID 的快照。"""
        return frozenset(self._members)

    @property
    def member_count(self) -> int:
        return len(self._members)

    @property
    def remaining_capacity(self) -> int:
        """剩余空位数。"""
        return self.capacity - len(self._members)

    @property
    def is_full(self) -> bool:
        return len(self._members) >= self.capacity

    @property
    def is_empty(self) -> bool:
        return not self._members

    @property
    def state(self) -> RoomState:
        if self.is_empty:
            return RoomState.EMPTY
        if self.is_full:
            return RoomState.FULL
        return RoomState.PARTIAL

    def has_member(self, user_id: str) -> bool:
        return user_id in self._members

    # ── 成员变更 ──────────────────────────────────────────────────────

    def add_user(self, user: User) -> bool:
        """把用户加入本房间。

        Returns:
            加入成功或已是成员时返回 ``True``；房间已满时返回 ``False``。

        Raises:
            MembershipInconsistencyError: 用户仍记录着其他房间（须先由注册表释放），
                或用户拒绝加入本房间签发的 ID。
        """
        if user.id in self._members:
            return True
        if user.is_in_chat_room() and not user.is_in_chat_room(self.id):
            raise MembershipInconsistencyError(
                f"用户 {user.id} 仍在房间 {user.room_id}，不能直接加入房间 {self.id}",
            )
        if self.is_full:
            logger.debug("房间已满 | room=%s | capacity=%d", self.id, self.capacity)
            return False
        if not user.join_chat_room(self.id):
            raise MembershipInconsistencyError(
                f"用户 {user.id} 无法加入房间 {self.id}",
            )
        self._members.add(user.id)
        return True

    def remove_user(self, user: User) -> bool:
        """把用户移出本房间，并让用户清除自身记录的房间。

        对非成员调用是无副作用的空操作。成员清空时触发 ``on_empty`` 回调。

        Returns:
            用户原本是成员并已移除时返回 ``True``，否则返回 ``False``。

        Raises:
            MembershipInconsistencyError: 用户是本房间成员，但自身记录的是其他房间。
        """
        if user.id not in self._members:
            return False
        self._members.discard(user.id)
        left = user.leave_chat_room(self.id)
        if self.is_empty and self._on_empty is not None:
            self._on_empty(self)
        if not left:
            raise MembershipInconsistencyError(
                f"用户 {user.id} 是房间 {self.id} 的成员，但记录的房间为 {user.room_id}",
            )
        return True

    def info(self) -> RoomInfoData:
        """返回房间摘要信息。"""
        return RoomInfoData(
            room_id=self.id,
            capacity=self.capacity,
            member_count=self.member_count,
            state=self.state,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return f"ChatRoom(id={self.id!r}, members={len(self._members)}/{self.capacity})"
