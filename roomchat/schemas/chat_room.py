"""
roomchat.schemas.chat_room
~~~~~~~~~~~~~~~~~~~~~~~~~~

房间相关的 Pydantic 响应模型。
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class RoomState(str, Enum):
    """房间状态：由成员数与容量推导。"""

    EMPTY = "empty"
    PARTIAL = "partial"
    FULL = "full"


class RoomInfoData(BaseModel):
    """房间摘要信息数据类型"""

    room_id: str = Field(..., description="房间唯一标识")
    capacity: int = Field(..., description="房间人数上限")
    member_count: int = Field(..., description="当前成员数")
    state: RoomState = Field(..., description="房间状态：empty / partial / full")
    created_at: datetime = Field(..., description="房间创建时间（UTC）")
