"""IdentityConfig -- 身份校验配置加载

从环境变量加载配置，决定使用 HTTP 校验还是静态 token 表。
"""

import json
import os
from typing import Literal

import structlog
from pydantic import BaseModel, Field

from .models import VerifiedIdentity

log = structlog.get_logger()


class IdentityConfig(BaseModel):
    """Identity 包配置 -- 从环境变量加载

    环境变量:
        TASKTRAIL_AUTH_MODE: 校验模式（http/static）
        TASKTRAIL_IDENTITY_URL: 身份提供方校验地址
        TASKTRAIL_IDENTITY_TIMEOUT_S: 校验超时（秒，默认 10）
        TASKTRAIL_STATIC_TOKENS: static 模式的 token 表（JSON）
    """

    auth_mode: Literal["http", "static"] = Field(
        default="http",
        description="校验模式：http / static",
    )
    verify_url: str = Field(
        default="http://localhost:9099/verify",
        description="身份提供方 token 校验地址",
    )
    timeout_s: int = Field(
        default=10,
        ge=1,
        description="校验请求超时（秒）",
    )
    static_tokens: dict[str, VerifiedIdentity] = Field(
        default_factory=dict,
        description="static 模式下 token -> 身份映射",
    )


def load_identity_config() -> IdentityConfig:
    """从环境变量加载 Identity 配置

    环境变量映射:
        TASKTRAIL_AUTH_MODE -> auth_mode (默认 "http")
        TASKTRAIL_IDENTITY_URL -> verify_url
        TASKTRAIL_IDENTITY_TIMEOUT_S -> timeout_s (默认 10)
        TASKTRAIL_STATIC_TOKENS -> static_tokens (默认 {})

    Returns:
        IdentityConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("TASKTRAIL_AUTH_MODE"):
        if val in ("http", "static"):
            kwargs["auth_mode"] = val
        else:
            log.warning(
                "invalid_auth_mode_config",
                env_var="TASKTRAIL_AUTH_MODE",
                value=val,
                fallback="http",
            )

    if val := os.environ.get("TASKTRAIL_IDENTITY_URL"):
        kwargs["verify_url"] = val

    if val := os.environ.get("TASKTRAIL_IDENTITY_TIMEOUT_S"):
        try:
            kwargs["timeout_s"] = int(val)
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="TASKTRAIL_IDENTITY_TIMEOUT_S",
                value=val,
                fallback=10,
            )
            # 使用默认值，不阻塞启动

    if val := os.environ.get("TASKTRAIL_STATIC_TOKENS"):
        try:
            kwargs["static_tokens"] = json.loads(val)
        except json.JSONDecodeError:
            log.warning(
                "invalid_static_tokens_config",
                env_var="TASKTRAIL_STATIC_TOKENS",
            )

    return IdentityConfig(**kwargs)
