"""
roomchat.services.client_session
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

单个 WebSocket 连接的会话句柄。

``User`` 只通过 ``join(channel)`` / ``leave(channel)`` 与传输层交互。
"""
from __future__ import annotations

import uuid

from fastapi import WebSocket

from roomchat.services.channel_hub import ChannelHub


class ClientSession:
    """包装一个 WebSocket 连接，并把频道操作委托给 ``ChannelHub``。

    Attributes:
        session_id: 会话标识（仅用于日志）。
        websocket: 底层 WebSocket 连接。
        hub: 频道中心。
    """

    def __init__(self, websocket: WebSocket, hub: ChannelHub) -> None:
        self.session_id = uuid.uuid4().hex[:8]
        self.websocket = websocket
        self.hub = hub

    def join(self, channel: str) -> None:
        self.hub.join(channel, self)

    def leave(self, channel: str) -> None:
        self.hub.leave(channel, self)

    async def send_text(self, message: str) -> None:
        await self.websocket.send_text(message)

    def __repr__(self) -> str:
        return f"ClientSession({self.session_id})"
