"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + 身份校验器与统计账本初始化 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from tasktrail.core.config import API_PREFIX, get_cors_origins, get_db_path
from tasktrail.core.ledger import StatsLedger
from tasktrail.core.store import create_store_group
from tasktrail.identity import create_verifier, load_identity_config

from .errors import register_exception_handlers
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import health, tasks, users

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB 与身份校验器，关闭时清理连接"""
    db_path = get_db_path()
    store_group = await create_store_group(db_path)
    app.state.store_group = store_group
    app.state.ledger = StatsLedger(store_group)

    identity_config = load_identity_config()
    app.state.identity_verifier = create_verifier(identity_config)
    log.info(
        "identity_verifier_initialized",
        mode=identity_config.auth_mode,
        verify_url=identity_config.verify_url,
    )

    yield

    if getattr(app.state, "store_group", None):
        await app.state.store_group.conn.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="TaskTrail Gateway",
        version="0.1.0",
        description="任务跟踪 API：活动日志与用户统计",
        lifespan=lifespan,
    )

    # 注册中间件（后注册的在外层：CORS -> Logging -> Trace）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_logging()
    setup_logfire(app)

    register_exception_handlers(app)

    app.include_router(tasks.router, prefix=API_PREFIX, tags=["tasks"])
    app.include_router(users.router, prefix=API_PREFIX, tags=["users"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
