"""
roomchat.services.user
~~~~~~~~~~~~~~~~~~~~~~

用户领域模型 —— 一个已连接的匿名客户端会话。

用户只记录当前所在房间的 ID（同一时刻最多一个房间），
通过会话句柄的 ``join`` / ``leave`` 通知传输层切换广播频道。
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Protocol

from roomchat.core.exceptions import MembershipInconsistencyError
from roomchat.core.logging import get_logger
from roomchat.services.chat_room import ChatRoom

logger = get_logger(__name__)


class SessionHandle(Protocol):
    """传输层会话：能加入/离开一个命名广播频道。"""

    def join(self, channel: str) -> None: ...

    def leave(self, channel: str) -> None: ...


class User:
    """通过 WebSocket 会话连接到服务的用户。

    Attributes:
        session: 用户所在的传输层会话。
    """

    def __init__(self, session: SessionHandle, user_id: str, created_at: datetime) -> None:
        self.session = session
        self._id = user_id
        self._created_at = created_at
        self._room_id: str | None = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def room_id(self) -> str | None:
        """当前所在房间 ID，不在任何房间时为 ``None``。"""
        return self._room_id

    def is_in_chat_room(self, room_id: str | None = None) -> bool:
        """检查用户是否在指定房间。

        - ``room_id`` 为 ``None`` 时，检查用户是否在任意房间
        - 否则要求当前房间 ID 与 ``room_id`` 完全相等
        """
        if room_id is None:
            return self._room_id is not None
        return self._room_id == room_id

    def join_chat_room(self, room_id: str) -> bool:
        """加入指定房间（先离开当前房间）。

        Returns:
            ``room_id`` 不是合法的房间 ID 时返回 ``False``，原有成员关系不变；
            否则返回 ``True``。

        Raises:
            MembershipInconsistencyError: 无法离开当前所在的房间。
        """
        if not ChatRoom.is_id_for_chat_room(room_id):
            logger.debug("拒绝加入非法房间 ID | user=%s | room=%r", self._id, room_id)
            return False
        if not self.leave_chat_room(self._room_id):
            raise MembershipInconsistencyError(
                f"用户 {self._id} 无法离开当前房间 {self._room_id}",
            )
        self._room_id = room_id
        self.session.join(room_id)
        return True

    def leave_chat_room(self, room_id: str | None = None) -> bool:
        """离开当前房间，或在指定 ``room_id`` 时仅离开该房间。

        Returns:
            已离开或本就不在房间时返回 ``True``；
            指定的 ``room_id`` 不是当前房间时返回 ``False``。
        """
        if room_id is not None and room_id != self._room_id:
            return False
        if self._room_id is None:
            return True
        self.session.leave(self._room_id)
        self._room_id = None
        return True

    @classmethod
    def create(cls, session: SessionHandle) -> User:
        """创建一个随机 ID、以当前 UTC 时间为创建时间的新用户。"""
        return cls(session, str(uuid.uuid4()), datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"User(id={self._id!r}, room_id={self._room_id!r})"
