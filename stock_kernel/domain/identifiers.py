"""
Identifier parsing at the kernel boundary.

Article and category ids are positive integers owned by the external
catalog.  Row ids (movements, count sessions, count details) are UUIDs.
Callers may hand either over as strings decoded from JSON or URL paths.
"""

from typing import Any
from uuid import UUID

from stock_kernel.exceptions import InvalidArticleIdError, InvalidCategoryIdError


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        result = value
    elif isinstance(value, str) and value.strip().isdigit():
        result = int(value.strip())
    else:
        return None
    return result if result > 0 else None


def parse_article_id(value: Any) -> int:
    """Return ``value`` as a positive int or raise InvalidArticleIdError."""
    result = _positive_int(value)
    if result is None:
        raise InvalidArticleIdError(value)
    return result


def parse_category_id(value: Any) -> int | None:
    """None means "no filter"; anything else must be a positive int."""
    if value is None:
        return None
    result = _positive_int(value)
    if result is None:
        raise InvalidCategoryIdError(value)
    return result


def parse_uuid(value: Any) -> UUID | None:
    """Return a UUID, or None when ``value`` cannot be one."""
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return UUID(value.strip())
    except ValueError:
        return None
