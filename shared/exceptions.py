"""
Centralized exception classes for consistent error handling
"""
from fastapi import HTTPException, status
from typing import Optional, Dict, Any
import uuid


class BaseAPIException(HTTPException):
    """Base exception class for API errors"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        error_id: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
        details: Optional[Any] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code or f"ERR_{status_code}"
        self.error_id = error_id or str(uuid.uuid4())
        self.detail = detail
        self.details = details


class ValidationError(BaseAPIException):
    """Raised when input validation or a hierarchy rule fails"""

    def __init__(
        self,
        detail: str,
        error_code: str = "VALIDATION_ERROR",
        details: Optional[Any] = None,
        error_id: Optional[str] = None
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
            error_id=error_id,
            details=details
        )


class AuthenticationError(BaseAPIException):
    """Raised when authentication fails"""

    def __init__(
        self,
        detail: str = "Authentication required",
        error_id: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="AUTH_ERROR",
            error_id=error_id,
            headers=headers
        )


class AuthorizationError(BaseAPIException):
    """Raised when authorization fails"""

    def __init__(
        self,
        detail: str = "Insufficient permissions",
        error_code: str = "AUTHORIZATION_ERROR",
        details: Optional[Any] = None,
        error_id: Optional[str] = None
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=error_code,
            error_id=error_id,
            details=details
        )


class NotFoundError(BaseAPIException):
    """Raised when a resource is not found"""

    def __init__(self, resource: str = "Resource", error_id: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
            error_code="NOT_FOUND",
            error_id=error_id
        )


class ConflictError(BaseAPIException):
    """Raised when a resource conflict occurs"""

    def __init__(
        self,
        detail: str,
        error_code: str = "CONFLICT",
        details: Optional[Any] = None,
        error_id: Optional[str] = None
    ):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code,
            error_id=error_id,
            details=details
        )

