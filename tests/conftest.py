"""
tests.conftest
~~~~~~~~~~~~~~

共享 pytest fixtures —— 用 mock 会话代替真实 WebSocket，
使房间逻辑的单元测试无需启动服务即可运行。
"""
from __future__ import annotations

import os
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

# ── 在所有测试导入前设置环境变量 ─────────────────────────────────────
os.environ.setdefault("ENVIRONMENT", "test")

from roomchat.services.chat_room_controller import ChatRoomController  # noqa: E402
from roomchat.services.user import User  # noqa: E402


@pytest.fixture()
def make_user() -> Callable[[], User]:
    """返回一个工厂：创建使用 mock 会话句柄的用户。"""

    def _make() -> User:
        return User.create(MagicMock())

    return _make


@pytest.fixture()
def user(make_user: Callable[[], User]) -> User:
    return make_user()


@pytest.fixture()
def controller() -> ChatRoomController:
    return ChatRoomController()
