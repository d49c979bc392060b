"""
Centralized error handlers for FastAPI applications

- Global exception handler with error correlation IDs
- Consistent error response format
- Proper error logging with context
"""
import logging
import uuid
import traceback
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .exceptions import BaseAPIException
from .error_context import error_context_middleware

logger = logging.getLogger(__name__)


def _error_body(error_id: str, code: str, message, status_code: int, details=None) -> dict:
    body = {
        "id": error_id,
        "code": code,
        "message": message,
        "status_code": status_code,
    }
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return {"error": body}


async def base_api_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    """
    Handle custom API exceptions - ensures proper error correlation

    Client errors are logged at WARNING, server errors at ERROR.
    """
    error_id = exc.error_id
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING

    logger.log(
        level,
        f"[{error_id}] {exc.error_code}: {exc.detail}",
        extra={
            "error_id": error_id,
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": str(request.url.path),
            "method": request.method,
        }
    )

    headers = dict(exc.headers or {})
    headers["X-Error-ID"] = error_id

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(error_id, exc.error_code, exc.detail, exc.status_code, exc.details),
        headers=headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle plain HTTP exceptions (404 on unknown routes, 405, ...)"""
    error_id = getattr(request.state, 'error_id', None) or str(uuid.uuid4())

    logger.warning(
        f"[{error_id}] HTTP {exc.status_code}: {exc.detail}",
        extra={
            "error_id": error_id,
            "status_code": exc.status_code,
            "path": str(request.url.path),
            "method": request.method,
        }
    )

    headers = dict(getattr(exc, "headers", None) or {})
    headers["X-Error-ID"] = error_id

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(error_id, f"HTTP_{exc.status_code}", exc.detail, exc.status_code),
        headers=headers
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors"""
    error_id = getattr(request.state, 'error_id', None) or str(uuid.uuid4())

    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    logger.warning(
        f"[{error_id}] Validation error: {errors}",
        extra={
            "error_id": error_id,
            "path": str(request.url.path),
            "method": request.method,
        }
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(error_id, "VALIDATION_ERROR", "Request validation failed", 422, errors),
        headers={"X-Error-ID": error_id}
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions

    Stack traces are logged but never exposed to the client; the error id is
    returned so the caller can report it.
    """
    error_id = getattr(request.state, 'error_id', None) or str(uuid.uuid4())
    tb_str = ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    logger.error(
        f"[{error_id}] Unexpected error: {type(exc).__name__}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "path": str(request.url.path),
            "method": request.method,
            "exception_type": type(exc).__name__,
            "traceback": tb_str
        }
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            error_id,
            "INTERNAL_ERROR",
            "An unexpected error occurred. Please contact support with the error ID.",
            500,
        ),
        headers={"X-Error-ID": error_id}
    )


def register_error_handlers(app):
    """
    Register all error handlers with FastAPI app

    Handlers are registered most specific first, then the request
    correlation middleware is attached.
    """
    app.add_exception_handler(BaseAPIException, base_api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    error_context_middleware(app)
