"""
roomchat.schemas.api_response
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

房间 REST 接口的应答信封。

成功时 ``data`` 为房间摘要（或摘要列表）；房间 ID 非法、房间已回收等情况
用 ``error_json()`` 返回同一结构，HTTP 状态码与 ``code`` 保持一致。
"""
from __future__ import annotations

from typing import Any, Generic, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """``{"code": ..., "data": ..., "msg": ...}`` 信封。

    ``code`` 与 HTTP 状态码一致，客户端不必区分两套错误码。
    """

    code: int = Field(default=200, description="与 HTTP 状态码一致的结果码")
    data: T = Field(..., description="房间摘要、摘要列表，出错时为 null")
    msg: str = Field(default="success", description="结果说明")

    @classmethod
    def ok(cls, data: T, msg: str = "success") -> ApiResponse[T]:
        return cls(code=200, data=data, msg=msg)

    @classmethod
    def fail(cls, msg: str = "error", code: int = 500, data: Any = None) -> ApiResponse[Any]:
        return cls(code=code, data=data, msg=msg)


def error_json(status_code: int, msg: str) -> JSONResponse:
    """构造一个 ``data`` 为空、``code`` 等于 HTTP 状态码的错误响应。"""
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.fail(msg=msg, code=status_code).model_dump(),
    )
