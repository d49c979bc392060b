"""Translate hierarchy rule violations into API errors"""
from fastapi import Request
from fastapi.responses import JSONResponse
from shared.exceptions import (
    AuthorizationError,
    BaseAPIException,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from shared.error_context import get_error_context_id
from shared.error_handlers import base_api_exception_handler
from ..core.exceptions import (
    DuplicateEmployee,
    EmployeeNotFound,
    HierarchyError,
    InsufficientPermission,
)
import logging

logger = logging.getLogger(__name__)


def to_api_exception(exc: HierarchyError) -> BaseAPIException:
    error_id = get_error_context_id()
    if isinstance(exc, EmployeeNotFound):
        return NotFoundError("Employee", error_id=error_id)
    if isinstance(exc, InsufficientPermission):
        return AuthorizationError(exc.message, error_code=exc.code, details=exc.to_details(), error_id=error_id)
    if isinstance(exc, DuplicateEmployee):
        return ConflictError(exc.message, error_code=exc.code, details=exc.to_details(), error_id=error_id)
    return ValidationError(exc.message, error_code=exc.code, details=exc.to_details(), error_id=error_id)


async def hierarchy_exception_handler(request: Request, exc: HierarchyError) -> JSONResponse:
    """Rejected mutations are logged with their violation code"""
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc.code}")
    return await base_api_exception_handler(request, to_api_exception(exc))
