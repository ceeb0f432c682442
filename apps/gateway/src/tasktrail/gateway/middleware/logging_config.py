"""structlog 配置模块

dev 模式：ConsoleRenderer 可读输出；json 模式：结构化 JSON 输出。
所有日志在渲染前经过敏感字段脱敏（password/token/authorization 等）。
Logfire APM：LOGFIRE_SEND_TO_LOGFIRE 环境变量控制，默认仅本地日志。
"""

import logging
import os
from collections.abc import MutableMapping
from typing import Any

import structlog

# 渲染前需要脱敏的字段名（不区分大小写）
SENSITIVE_KEYS: frozenset[str] = frozenset(
    {"password", "token", "authorization", "apikey", "api_key", "secret"}
)

REDACTED = "[REDACTED]"

# 第三方库日志降噪
_NOISY_LOGGERS = ("aiosqlite", "httpx", "httpcore")


def redact_sensitive(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor：把敏感字段替换为 [REDACTED]"""
    for key in list(event_dict):
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = REDACTED
    return event_dict


def setup_logging() -> None:
    """初始化 structlog 配置

    环境变量:
        TASKTRAIL_LOG_FORMAT: "json" 生产输出 / "dev"（默认）可读输出
        TASKTRAIL_LOG_LEVEL: 日志级别，默认 INFO
    """
    log_format = os.environ.get("TASKTRAIL_LOG_FORMAT", "dev")
    log_level = os.environ.get("TASKTRAIL_LOG_LEVEL", "INFO")

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_sensitive,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(
            ensure_ascii=False
        )
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # 标准库 logging 共用同一套渲染
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logfire(app: Any) -> None:
    """Logfire 可选初始化

    LOGFIRE_SEND_TO_LOGFIRE="true" 时启用（需要 LOGFIRE_TOKEN），
    初始化失败仅记录警告，服务照常启动。
    """
    send_to_logfire = os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower()
    if send_to_logfire != "true":
        return

    try:
        import logfire

        logfire.configure()
        logfire.instrument_fastapi(app)
    except Exception:
        structlog.get_logger().warning(
            "logfire_init_failed",
            message="Logfire init failed, falling back to local logging",
        )
