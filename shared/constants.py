"""
Shared constants across services
"""
from typing import Final

# Request limits
DEFAULT_PAGE_SIZE: Final[int] = 50
MAX_PAGE_SIZE: Final[int] = 200

# File upload limits
MAX_FILE_SIZE_MB: Final[int] = 10

# Pagination defaults
DEFAULT_PAGE: Final[int] = 1

# Password policy
MIN_PASSWORD_LENGTH: Final[int] = 6

# Error Messages
ERROR_INVALID_CREDENTIALS: Final[str] = "Invalid credentials"
ERROR_TOKEN_REQUIRED: Final[str] = "Access token required"
ERROR_TOKEN_EXPIRED: Final[str] = "Token expired"
ERROR_INVALID_TOKEN: Final[str] = "Invalid token"
ERROR_ADMIN_REQUIRED: Final[str] = "Admin access required"
