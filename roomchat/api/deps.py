from fastapi import Request

from roomchat.services.chat_room_controller import ChatRoomController


def get_chat_room_controller(request: Request) -> ChatRoomController:
    return request.app.state.chat_room_controller
