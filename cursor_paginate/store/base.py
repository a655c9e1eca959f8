"""Contract between the paginator and a document store."""

from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class DocumentStore(Protocol):
    """Query surface a store must expose to be paginated.
    
    ``find`` receives ``options`` with an ordered ``sort`` mapping
    (field -> 1 or -1), a ``limit`` and any pass-through options.

    A store whose filter paths do not address its records directly can also
    define ``get_sort_value(record, path)``. Cursors then read sort values
    through it instead of ``get_field``.
    """
    
    primary_key: str
    
    def is_valid_key(self, value: str) -> bool:
        """Whether a string matches the store-native key format."""
        ...
    
    async def find(
        self,
        filter: Mapping[str, Any],
        projection: Optional[Mapping[str, Any]] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> List[Any]:
        ...
    
    async def count(self, filter: Mapping[str, Any]) -> int:
        ...


_MISSING = object()


def get_field(record: Any, path: str, default: Any = None) -> Any:
    """Resolve a dotted path on a mapping or attribute-style record."""
    current = record
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        else:
            current = getattr(current, part, _MISSING)
        if current is _MISSING:
            return default
    return current
