"""
roomchat.api.room_endpoints
~~~~~~~~~~~~~~~~~~~~~~~~~~~

房间只读 REST 接口。

路由前缀 ``/api``，房间的创建与成员变更只发生在 WebSocket 连接流程中。

端点:
  - ``GET  /rooms``             → 获取活跃房间列表
  - ``GET  /rooms/{room_id}``   → 获取房间详情
"""
from fastapi import APIRouter, Depends, Request
from roomchat.api.deps import get_chat_room_controller
from roomchat.core.rate_limit import limiter
from roomchat.schemas.api_response import ApiResponse, error_json
from roomchat.schemas.chat_room import RoomInfoData
from roomchat.services.chat_room import ChatRoom
from roomchat.services.chat_room_controller import ChatRoomController

router: APIRouter = APIRouter()


@router.get("/rooms", summary="获取活跃房间列表", response_model=ApiResponse[list[RoomInfoData]])
@limiter.limit("10/second")
async def list_rooms(
    request: Request,
    controller: ChatRoomController = Depends(get_chat_room_controller),
):
    """返回所有活跃房间（按创建先后排序）。"""
    return ApiResponse.ok(data=controller.list_rooms())


@router.get("/rooms/{room_id}", summary="获取房间详情", response_model=ApiResponse[RoomInfoData])
@limiter.limit("5/second")
async def room_info(
    request: Request,
    room_id: str,
    controller: ChatRoomController = Depends(get_chat_room_controller),
):
    """返回指定房间的容量与成员数。

    Args:
        room_id: 房间唯一标识。格式非法返回 400，不存在（或已回收）返回 404。
    """
    if not ChatRoom.is_id_for_chat_room(room_id):
        return error_json(400, "非法的房间 ID")
    room = controller.get_room(room_id)
    if room is None:
        return error_json(404, "房间不存在")
    return ApiResponse.ok(data=room.info())
