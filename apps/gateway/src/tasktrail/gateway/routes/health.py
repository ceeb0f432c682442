"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含 SQLite 连通性、磁盘空间，
         profile=identity/full 时额外探测身份提供方。
"""

import shutil

import structlog
from fastapi import APIRouter, Query, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(
    request: Request,
    profile: str | None = Query(
        default=None,
        description="core（默认）仅核心检查；identity/full 包含身份提供方探测",
    ),
):
    """Readiness 检查

    检查项：
    1. sqlite: 数据库连通性
    2. disk_space_mb: 磁盘剩余空间
    3. identity: 根据 profile 决定是否探测身份提供方
    """
    effective_profile = profile or "core"

    checks: dict[str, str | int] = {}
    all_ok = True

    try:
        store_group = request.app.state.store_group
        cursor = await store_group.conn.execute("SELECT 1")
        await cursor.fetchone()
        checks["sqlite"] = "ok"
    except Exception as e:
        log.warning("readiness_sqlite_failed", error=str(e))
        checks["sqlite"] = "unavailable"
        all_ok = False

    try:
        checks["disk_space_mb"] = shutil.disk_usage("/").free // (1024 * 1024)
    except OSError:
        checks["disk_space_mb"] = 0
        all_ok = False

    if effective_profile in ("identity", "full"):
        verifier = getattr(request.app.state, "identity_verifier", None)
        healthy = False
        if verifier is not None:
            try:
                healthy = await verifier.health_check()
            except Exception as e:
                log.warning("health_check_error", error=str(e))
        checks["identity"] = "ok" if healthy else "unreachable"
        all_ok = all_ok and healthy
    else:
        checks["identity"] = "skipped"

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={
            "status": "ready" if all_ok else "not_ready",
            "profile": effective_profile,
            "checks": checks,
        },
    )
