"""异常处理器注册 -- 统一错误响应体 {"error": {"code", "message"}}

- TaskTrailError 子类：按自身 status_code / code 映射
- RequestValidationError：请求体校验失败统一返回 400（而非 FastAPI 默认 422）
- 其他未捕获异常：500 + 通用信息，详情只写服务端日志
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse
from tasktrail.core.exceptions import InternalError, TaskTrailError

log = structlog.get_logger()


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    """构造标准错误响应"""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


async def _handle_domain_error(request: Request, exc: TaskTrailError) -> JSONResponse:
    if exc.status_code >= 500:
        await log.aerror("domain_error", code=exc.code, error=exc.message)
        return error_response(exc.status_code, exc.code, InternalError().message)
    return error_response(exc.status_code, exc.code, exc.message)


async def _handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg', 'invalid value')}" if location else message
    return error_response(400, "VALIDATION_ERROR", message)


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled_error", path=request.url.path)
    error = InternalError()
    return error_response(error.status_code, error.code, error.message)


def register_exception_handlers(app: FastAPI) -> None:
    """注册全局异常处理器"""
    app.add_exception_handler(TaskTrailError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(Exception, _handle_unexpected)
