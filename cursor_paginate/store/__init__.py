"""Document stores that can be paginated."""

from .base import DocumentStore, get_field

__all__ = [
    "DocumentStore",
    "get_field"
]
