"""
Shared utilities and constants for the services
"""
from .constants import *
from .exceptions import *
from .validators import *
from .error_context import get_error_context_id, set_error_context_id, log_with_context

__all__ = [
    # Constants
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "DEFAULT_PAGE",
    "MAX_FILE_SIZE_MB",
    "MIN_PASSWORD_LENGTH",
    # Exceptions
    "BaseAPIException",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    # Validators
    "validate_pagination",
    "total_pages",
    # Error context
    "get_error_context_id",
    "set_error_context_id",
    "log_with_context",
]
