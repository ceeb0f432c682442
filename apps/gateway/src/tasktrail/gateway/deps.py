"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store、账本与身份校验

实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

import structlog
from fastapi import Depends, Request
from tasktrail.core.exceptions import AuthError
from tasktrail.core.ledger import StatsLedger
from tasktrail.core.models import UserSnapshot
from tasktrail.core.store import StoreGroup
from tasktrail.identity import IdentityError, VerifiedIdentity

log = structlog.get_logger()

_BEARER_PREFIX = "bearer "


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_ledger(request: Request) -> StatsLedger:
    """从 app.state 获取 StatsLedger 实例"""
    return request.app.state.ledger


def get_identity_verifier(request: Request):
    """从 app.state 获取身份校验器"""
    return request.app.state.identity_verifier


async def get_current_user(
    request: Request,
    verifier=Depends(get_identity_verifier),
) -> VerifiedIdentity:
    """校验 Authorization: Bearer <token>，返回已验证身份

    Raises:
        AuthError: 缺少 token，或身份提供方拒绝/不可达
    """
    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(_BEARER_PREFIX):
        raise AuthError("No token provided")

    token = header[len(_BEARER_PREFIX):].strip()
    if not token:
        raise AuthError("No token provided")

    try:
        identity = await verifier.verify(token)
    except IdentityError as e:
        await log.awarning(
            "token_verification_failed",
            error_type=type(e).__name__,
            recoverable=e.recoverable,
        )
        raise AuthError("Invalid token") from e

    structlog.contextvars.bind_contextvars(uid=identity.uid)
    return identity


async def get_acting_user(
    identity: VerifiedIdentity = Depends(get_current_user),
) -> UserSnapshot:
    """当前用户的快照（写入 createdBy / lastUpdatedBy / actingUser）"""
    return UserSnapshot(
        uid=identity.uid,
        name=identity.display_name,
        email=identity.email,
    )
