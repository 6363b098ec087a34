"""
roomchat.core.exceptions
~~~~~~~~~~~~~~~~~~~~~~~~

房间成员管理的异常类型。

校验失败（非法房间 ID、非法容量）通过返回值报告，不会抛出；
这里只定义“内部状态不一致”这类必须立即中止的错误。
"""
from __future__ import annotations


class ChatRoomError(Exception):
    """房间相关错误的基类。"""


class MembershipInconsistencyError(ChatRoomError):
    """用户记录的房间与房间成员集合出现分歧。

    例如用户无法离开自己当前所在的房间，或者房间成员记录的房间与用户自身记录不符。
    继续处理可能破坏“同一时刻最多在一个房间”的约束，因此必须中止本次事件。
    """
