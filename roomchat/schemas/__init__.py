"""
roomchat.schemas
~~~~~~~~~~~~~~~~
Pydantic schemas and models for the API.
"""
from roomchat.schemas.api_response import ApiResponse
from roomchat.schemas.chat_room import RoomInfoData, RoomState

# Call model_rebuild to resolve forward references in generic Pydantic models.
ApiResponse.model_rebuild()

__all__ = ["ApiResponse", "RoomInfoData", "RoomState"]
