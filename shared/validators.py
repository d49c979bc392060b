"""
Shared validation utilities
"""
from typing import Optional
from .constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


def validate_pagination(page: Optional[int] = None, limit: Optional[int] = None) -> tuple[int, int]:
    """Validate and normalize page/limit pagination parameters"""
    page = page or DEFAULT_PAGE
    limit = limit or DEFAULT_PAGE_SIZE

    if page < 1:
        page = DEFAULT_PAGE
    if limit < 1:
        limit = DEFAULT_PAGE_SIZE
    if limit > MAX_PAGE_SIZE:
        limit = MAX_PAGE_SIZE

    return page, limit


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed to show `total` items"""
    if limit < 1:
        return 0
    return (total + limit - 1) // limit
