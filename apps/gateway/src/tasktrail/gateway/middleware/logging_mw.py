"""LoggingMiddleware -- 请求级访问日志

为每个 HTTP 请求生成 ULID request_id，绑定到 structlog contextvars，
通过 X-Request-ID 响应头返回；请求完成时记录状态码与耗时，
4xx/5xx 响应以 warning 级别记录。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """访问日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(ULID())
        started = time.monotonic()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        log = structlog.get_logger()
        await log.ainfo(
            "request_started",
            client=request.client.host if request.client else None,
        )

        response = await call_next(request)

        duration_ms = int((time.monotonic() - started) * 1000)
        if response.status_code >= 400:
            await log.awarning(
                "request_failed", status_code=response.status_code, duration_ms=duration_ms
            )
        else:
            await log.ainfo(
                "request_completed", status_code=response.status_code, duration_ms=duration_ms
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
