"""Keyset (cursor) pagination over document stores."""

from .cursor import (
    DecodedCursor,
    encode_cursor,
    decode_cursor,
    is_object_id,
    is_uuid
)
from .direction import (
    SortOrder,
    TraversalMode,
    DirectionPair,
    DirectionTriple,
    resolve_directions
)
from .filters import (
    build_filters_from_cursor,
    stringify_sort_value,
    parse_date,
    parse_datetime,
    parse_number,
    parse_uuid
)
from .models import PaginationParams, PaginatedResult, QueryDirective
from .paginator import build_query, paginate, paginate_plugin, CursorPaginationMixin
from .links import create_link_header

__all__ = [
    "DecodedCursor",
    "encode_cursor",
    "decode_cursor",
    "is_object_id",
    "is_uuid",
    "SortOrder",
    "TraversalMode",
    "DirectionPair",
    "DirectionTriple",
    "resolve_directions",
    "build_filters_from_cursor",
    "stringify_sort_value",
    "parse_date",
    "parse_datetime",
    "parse_number",
    "parse_uuid",
    "PaginationParams",
    "PaginatedResult",
    "QueryDirective",
    "build_query",
    "paginate",
    "paginate_plugin",
    "CursorPaginationMixin",
    "create_link_header"
]
