"""
roomchat.api.chat_ws
~~~~~~~~~~~~~~~~~~~~

WebSocket 聊天接口 —— 自动分房模式。

每个新连接创建一个 ``User``，由 ``ChatRoomController`` 分配到有空位的房间，
之后该连接发送的文本会转发给同房间的所有成员（包括发送者）。
断开连接时通过连接时拿到的房间引用释放名额。

消息协议（服务端 → 客户端）:
  - ``[WELCOME:<user_id>:<room_id>]`` —— 分配房间成功
  - ``[JOIN:<user_id>]``              —— 有新成员加入
  - ``[USER:<user_id>:<text>]``       —— 成员消息
  - ``[LEAVE:<user_id>]``             —— 成员离开
  - ``[SYSTEM:<notice>]``             —— 系统提示（限流、消息过长等）
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from roomchat.core.exceptions import MembershipInconsistencyError
from roomchat.core.logging import get_logger, request_id_ctx_var
from roomchat.core.rate_limit import WebSocketRateLimiter
from roomchat.core.settings import settings
from roomchat.services.channel_hub import ChannelHub
from roomchat.services.chat_room_controller import ChatRoomController
from roomchat.services.client_session import ClientSession
from roomchat.services.user import User

logger = get_logger(__name__)

router: APIRouter = APIRouter()


@router.websocket("/ws/chat")
async def websocket_chat_endpoint(websocket: WebSocket, capacity: int | None = None) -> None:
    """WebSocket 聊天端点。

    Args:
        websocket: FastAPI WebSocket 连接对象。
        capacity: (可选)期望的房间容量，默认使用 ``settings.ROOM_CAPACITY``。
    """
    ws_req_id = f"ws-{uuid.uuid4().hex[:8]}"
    token = request_id_ctx_var.set(ws_req_id)

    try:
        controller: ChatRoomController = websocket.app.state.chat_room_controller
        hub: ChannelHub = websocket.app.state.channel_hub
        target_capacity = settings.ROOM_CAPACITY if capacity is None else capacity

        await websocket.accept()
        session = ClientSession(websocket, hub)
        user = User.create(session)

        room = controller.add_user_to_valid_chat_room(user, target_capacity)
        if room is None:
            await session.send_text("[SYSTEM:房间容量必须为正整数]")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

        ws_limiter = WebSocketRateLimiter(interval_seconds=settings.WS_RATE_LIMIT_INTERVAL)

        try:
            await session.send_text(f"[WELCOME:{user.id}:{room.id}]")
            await hub.broadcast(room.id, f"[JOIN:{user.id}]", exclude=session)

            while True:
                text: str = await websocket.receive_text()
                if not ws_limiter.is_allowed(user.id):
                    await session.send_text("[SYSTEM:发送速度太快啦，请慢一点~]")
                    continue
                if len(text) > settings.MESSAGE_MAX_LENGTH:
                    await session.send_text(
                        f"[SYSTEM:消息过长，最多 {settings.MESSAGE_MAX_LENGTH} 个字符]",
                    )
                    continue
                if user.room_id is None:
                    break
                await hub.broadcast(user.room_id, f"[USER:{user.id}:{text}]")

        except WebSocketDisconnect:
            pass  # 正常断开
        except Exception as e:
            logger.error("WebSocket 异常: %s | room=%s", e, room.id, exc_info=True)
        finally:
            try:
                room.remove_user(user)
            except MembershipInconsistencyError as e:
                logger.error("成员状态不一致: %s | room=%s", e, room.id, exc_info=True)
                raise
            finally:
                ws_limiter.remove_client(user.id)
                logger.info(
                    "用户离开房间 | user=%s | room=%s | 剩余: %d",
                    user.id, room.id, room.member_count,
                )
                if not room.is_empty:
                    await hub.broadcast(room.id, f"[LEAVE:{user.id}]")

    finally:
        request_id_ctx_var.reset(token)
