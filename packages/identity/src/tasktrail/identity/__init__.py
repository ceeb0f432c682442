"""TaskTrail Identity -- 身份提供方校验抽象层

packages/identity 的公开接口导出。
"""

from .client import HttpIdentityVerifier
from .config import IdentityConfig, load_identity_config
from .exceptions import IdentityError, IdentityUnreachableError, InvalidTokenError
from .models import VerifiedIdentity
from .static_verifier import StaticIdentityVerifier

__all__ = [
    "VerifiedIdentity",
    "HttpIdentityVerifier",
    "StaticIdentityVerifier",
    "IdentityConfig",
    "load_identity_config",
    "IdentityError",
    "InvalidTokenError",
    "IdentityUnreachableError",
    "create_verifier",
]


def create_verifier(config: IdentityConfig) -> HttpIdentityVerifier | StaticIdentityVerifier:
    """按配置创建身份校验器"""
    if config.auth_mode == "static":
        return StaticIdentityVerifier(config.static_tokens)
    return HttpIdentityVerifier(
        verify_url=config.verify_url,
        timeout_s=config.timeout_s,
    )
