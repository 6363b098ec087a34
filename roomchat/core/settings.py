"""
roomchat.core.settings
~~~~~~~~~~~~~~~~~~~~~~

服务配置：房间默认容量、消息长度与发送频率限制、监听地址、日志级别。

由 pydantic-settings 读取，环境变量优先于 ``.env.{ENVIRONMENT}``，再优先于 ``.env``。
``ROOM_CAPACITY`` 在加载时即校验为正整数，非法配置直接启动失败。
"""
from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# 读取当前环境标识（在 Settings 类定义之前，用于决定加载哪个 .env 文件）
_CURRENT_ENV: str = os.getenv("ENVIRONMENT", "dev")

# 未显式配置 LOG_LEVEL 时各环境的默认日志级别
_DEFAULT_LOG_LEVELS: dict[str, str] = {"dev": "INFO", "test": "DEBUG", "prod": "WARNING"}


class Settings(BaseSettings):
    """全局配置对象，字段值按如下优先级加载：环境变量 > .env.{env} > .env > 默认值。"""

    # ── 基础 ──────────────────────────────────────────────────────────
    PROJECT_NAME: str = Field(default="RoomChat", description="项目名称")
    VERSION: str = Field(default="0.1.0", description="版本号")
    ENVIRONMENT: Literal["dev", "test", "prod"] = Field(
        default="dev",
        description="运行环境：dev / test / prod",
    )

    # ── 房间 ──────────────────────────────────────────────────────────
    ROOM_CAPACITY: int = Field(
        default=2,
        gt=0,
        description="新连接默认分配的房间容量（人数上限）",
    )
    MESSAGE_MAX_LENGTH: int = Field(
        default=500,
        gt=0,
        description="单条聊天消息的最大字符数",
    )
    WS_RATE_LIMIT_INTERVAL: float = Field(
        default=0.5,
        ge=0,
        description="同一连接两条消息之间的最小间隔（秒）",
    )

    # ── 服务 ──────────────────────────────────────────────────────────
    HOST: str = Field(default="0.0.0.0", description="服务监听地址")
    PORT: int = Field(default=3000, description="服务监听端口")
    LOG_LEVEL: str | None = Field(default=None, description="日志级别，留空则按运行环境推断")

    # ── Pydantic Settings ─────────────────────────────────────────────
    # 先加载 .env.{env} 再加载 .env，前者优先级更高
    model_config = SettingsConfigDict(
        env_file=(f".env.{_CURRENT_ENV}", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── 按运行环境派生的开关 ──────────────────────────────────────────

    @property
    def is_prod(self) -> bool:
        return self.ENVIRONMENT == "prod"

    @property
    def debug(self) -> bool:
        """FastAPI debug 模式与热重载只在本地开发时打开。"""
        return self.ENVIRONMENT == "dev"

    @property
    def reload(self) -> bool:
        return self.debug

    @property
    def effective_log_level(self) -> str:
        """显式配置的 ``LOG_LEVEL`` 优先，否则按运行环境取默认级别。

        test 环境默认 DEBUG，分房、回收等房间事件会完整出现在失败用例的输出里。
        """
        if self.LOG_LEVEL:
            return self.LOG_LEVEL
        return _DEFAULT_LOG_LEVELS[self.ENVIRONMENT]

    @property
    def allow_cors_all_origins(self) -> bool:
        """生产环境之外放开跨域，方便本地前端直接连 /ws/chat。"""
        return not self.is_prod


@lru_cache
def get_settings() -> Settings:
    """进程内只解析一次配置。"""
    return Settings()


settings: Settings = get_settings()
