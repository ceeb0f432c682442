"""StaticIdentityVerifier -- 静态 token 表校验

开发与测试环境使用：token 直接映射到预先配置的身份，
不访问外部身份提供方。
"""

from .exceptions import InvalidTokenError
from .models import VerifiedIdentity


class StaticIdentityVerifier:
    """基于内存 token 表的身份校验器"""

    def __init__(self, tokens: dict[str, VerifiedIdentity] | None = None) -> None:
        self._tokens = dict(tokens or {})

    async def verify(self, token: str) -> VerifiedIdentity:
        """校验 token

        Raises:
            InvalidTokenError: token 未登记
        """
        identity = self._tokens.get(token)
        if identity is None:
            raise InvalidTokenError()
        return identity

    async def health_check(self) -> bool:
        """静态表无外部依赖，始终健康"""
        return True
