"""
roomchat.services.channel_hub
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

广播频道中心 —— 维护“频道名 → 在线会话集合”的映射与广播能力。

房间成员的增减只通过 ``ClientSession.join`` / ``ClientSession.leave`` 进入这里，
核心的房间逻辑只知道频道名，不持有任何连接对象。
"""
from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from roomchat.core.logging import get_logger

if TYPE_CHECKING:
    from roomchat.services.client_session import ClientSession

logger = get_logger(__name__)


class ChannelHub:
    """按频道分组的 WebSocket 会话广播器。

    Attributes:
        channels: 频道名到该频道内在线会话集合的映射。
    """

    def __init__(self) -> None:
        self.channels: dict[str, set[ClientSession]] = {}

    def join(self, channel: str, session: ClientSession) -> None:
        """把会话加入频道（频道不存在则自动创建）。"""
        self.channels.setdefault(channel, set()).add(session)

    def leave(self, channel: str, session: ClientSession) -> None:
        """把会话移出频道，频道为空时一并删除。"""
        sessions = self.channels.get(channel)
        if sessions is None:
            return
        sessions.discard(session)
        if not sessions:
            del self.channels[channel]

    def sessions(self, channel: str) -> frozenset[ClientSession]:
        """返回频道内当前会话的快照。"""
        return frozenset(self.channels.get(channel, ()))

    async def broadcast(
        self,
        channel: str,
        message: str,
        exclude: ClientSession | None = None,
    ) -> None:
        """向频道内所有会话广播消息。

        发送失败只记录日志，不会把会话移出频道：
        会话的频道归属只由断开连接的流程释放，保证与房间成员记录一致。
        """
        targets = [s for s in self.sessions(channel) if s is not exclude]
        if not targets:
            return
        results = await asyncio.gather(
            *(s.send_text(message) for s in targets),
            return_exceptions=True,
        )
        for session, result in zip(targets, results):
            if isinstance(result, Exception):
                logger.warning(
                    "广播失败 | channel=%s | session=%s | %s",
                    channel, session.session_id, result,
                )

    @property
    def channel_count(self) -> int:
        """当前存在的频道数。"""
        return len(self.channels)
