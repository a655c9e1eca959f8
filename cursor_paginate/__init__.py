"""Keyset pagination for JSON document stores."""

from .pagination import (
    PaginationParams,
    PaginatedResult,
    SortOrder,
    paginate,
    paginate_plugin,
    CursorPaginationMixin
)

__all__ = [
    "PaginationParams",
    "PaginatedResult",
    "SortOrder",
    "paginate",
    "paginate_plugin",
    "CursorPaginationMixin"
]
