"""HttpIdentityVerifier -- 身份提供方 token 校验封装

向校验地址发送 GET 请求（Authorization: Bearer <token>），
200 响应体为 {"uid", "email", "name"}。
"""

import httpx
import structlog
from pydantic import ValidationError

from .exceptions import IdentityError, IdentityUnreachableError, InvalidTokenError
from .models import VerifiedIdentity

log = structlog.get_logger()

# 健康检查超时（硬编码，应快速响应）
HEALTH_CHECK_TIMEOUT_S = 5

# 被身份提供方拒绝的状态码
_REJECTED_STATUS_CODES = (400, 401, 403)


class HttpIdentityVerifier:
    """通过 HTTP 校验 bearer token 的身份校验器"""

    def __init__(
        self,
        verify_url: str = "http://localhost:9099/verify",
        timeout_s: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初始化校验器

        Args:
            verify_url: token 校验地址
            timeout_s: 请求超时（秒）
            transport: 可选的 httpx transport（测试时注入 MockTransport）
        """
        self._verify_url = verify_url
        self._timeout_s = timeout_s
        self._transport = transport

    async def verify(self, token: str) -> VerifiedIdentity:
        """校验 token 并返回身份声明

        Raises:
            InvalidTokenError: token 被拒绝或响应体不含合法身份
            IdentityUnreachableError: 身份提供方连接失败或超时
            IdentityError: 身份提供方返回其他错误
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_s,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    self._verify_url,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.TransportError as e:
            log.warning(
                "identity_provider_unreachable",
                verify_url=self._verify_url,
                error_type=type(e).__name__,
            )
            raise IdentityUnreachableError(self._verify_url, e) from e

        if response.status_code in _REJECTED_STATUS_CODES:
            raise InvalidTokenError()
        if response.status_code != 200:
            raise IdentityError(
                f"Identity provider returned HTTP {response.status_code}",
                recoverable=response.status_code >= 500,
            )

        try:
            return VerifiedIdentity.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise InvalidTokenError("Identity provider returned no valid identity") from e

    async def health_check(self) -> bool:
        """探测身份提供方是否可达

        任何 HTTP 响应（包括 401）都视为可达。
        """
        try:
            async with httpx.AsyncClient(
                timeout=HEALTH_CHECK_TIMEOUT_S,
                transport=self._transport,
            ) as client:
                await client.get(self._verify_url)
            return True
        except httpx.HTTPError:
            return False
