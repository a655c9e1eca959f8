"""In-process document store speaking the same filter dialect as the database."""

import copy
import itertools
import logging
import os
import time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .base import get_field
from ..pagination.cursor import is_object_id
from ..pagination.paginator import CursorPaginationMixin


logger = logging.getLogger(__name__)

_PROCESS_RANDOM = os.urandom(5)
_counter = itertools.count(int.from_bytes(os.urandom(3), "big"))

_MISSING = object()


def new_object_id() -> str:
    """Generate an ObjectId-style key that sorts by creation time."""
    timestamp = int(time.time()).to_bytes(4, "big")
    counter = (next(_counter) % 0xFFFFFF).to_bytes(3, "big")
    return (timestamp + _PROCESS_RANDOM + counter).hex()


def _compare(operator: str) -> Callable[[Any, Any], bool]:
    def check(actual: Any, expected: Any) -> bool:
        if actual is _MISSING or actual is None or expected is None:
            return False
        try:
            if operator == "$gt":
                return actual > expected
            if operator == "$gte":
                return actual >= expected
            if operator == "$lt":
                return actual < expected
            return actual <= expected
        except TypeError:
            # Mismatched types never satisfy a range condition
            return False
    return check


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "$gt": _compare("$gt"),
    "$gte": _compare("$gte"),
    "$lt": _compare("$lt"),
    "$lte": _compare("$lte"),
    "$eq": lambda actual, expected: actual is not _MISSING and actual == expected,
    "$ne": lambda actual, expected: actual is _MISSING or actual != expected,
    "$in": lambda actual, expected: actual is not _MISSING and actual in expected,
    "$nin": lambda actual, expected: actual is _MISSING or actual not in expected,
    "$exists": lambda actual, expected: (actual is not _MISSING) == bool(expected),
}


def matches(document: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
    """Evaluate a store filter against a single document.
    
    Raises:
        ValueError: If the filter uses an unsupported operator
    """
    for key, condition in filter.items():
        if key == "$and":
            if not all(matches(document, sub) for sub in condition):
                return False
        elif key == "$or":
            if not any(matches(document, sub) for sub in condition):
                return False
        elif key.startswith("$"):
            raise ValueError(f"Unsupported filter operator: {key}")
        else:
            actual = get_field(document, key, _MISSING)
            if isinstance(condition, Mapping) and any(k.startswith("$") for k in condition):
                for operator, expected in condition.items():
                    if operator not in _OPERATORS:
                        raise ValueError(f"Unsupported filter operator: {operator}")
                    if not _OPERATORS[operator](actual, expected):
                        return False
            elif actual is _MISSING or actual != condition:
                return False
    return True


def sort_documents(documents: Iterable[Any], sort: Mapping[str, int]) -> List[Any]:
    """Sort documents by several fields, each in its own direction.
    
    Missing and null values sort first in ascending order.
    """
    result = list(documents)
    # Stable sorts applied from the least significant key
    for field, direction in reversed(list(sort.items())):
        def key(document, field=field):
            value = get_field(document, field)
            return (value is not None, value if value is not None else 0)
        result.sort(key=key, reverse=direction < 0)
    return result


def _project(document: Dict[str, Any], projection: Optional[Mapping[str, Any]], primary_key: str) -> Dict[str, Any]:
    if not projection:
        return document
    included = {field for field, flag in projection.items() if flag}
    if included:
        keep = included | ({primary_key} if projection.get(primary_key, 1) else set())
        return {field: value for field, value in document.items() if field in keep}
    return {field: value for field, value in document.items() if field not in projection}


class InMemoryDocumentStore(CursorPaginationMixin):
    """A list of documents queried with the document-store filter dialect.
    
    Documents are keyed by ``_id``, an ObjectId-style hexadecimal string that
    orders by insertion time. Returned documents are copies.
    """
    
    primary_key = "_id"
    
    def __init__(self, documents: Optional[Iterable[Mapping[str, Any]]] = None):
        self._documents: List[Dict[str, Any]] = []
        self.find_calls = 0
        self.count_calls = 0
        if documents:
            self.insert_many(documents)
    
    def __len__(self) -> int:
        return len(self._documents)
    
    def is_valid_key(self, value: str) -> bool:
        return is_object_id(value)
    
    def insert_one(self, document: Mapping[str, Any]) -> Dict[str, Any]:
        """Store a copy of a document, assigning ``_id`` when absent.
        
        Raises:
            ValueError: If ``_id`` is not an ObjectId-style key or is already taken
        """
        stored = copy.deepcopy(dict(document))
        stored.setdefault(self.primary_key, new_object_id())
        if not self.is_valid_key(stored[self.primary_key]):
            raise ValueError(f"Invalid key: {stored[self.primary_key]!r} is not an ObjectId-style key")
        if any(doc[self.primary_key] == stored[self.primary_key] for doc in self._documents):
            raise ValueError(f"Duplicate key: {stored[self.primary_key]}")
        self._documents.append(stored)
        return copy.deepcopy(stored)
    
    def insert_many(self, documents: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        return [self.insert_one(document) for document in documents]
    
    def delete_one(self, key: str) -> bool:
        for index, document in enumerate(self._documents):
            if document[self.primary_key] == key:
                del self._documents[index]
                return True
        return False
    
    async def find(
        self,
        filter: Mapping[str, Any],
        projection: Optional[Mapping[str, Any]] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        options = options or {}
        self.find_calls += 1
        
        found = [doc for doc in self._documents if matches(doc, filter)]
        if options.get("sort"):
            found = sort_documents(found, options["sort"])
        skip = options.get("skip", 0)
        limit = options.get("limit")
        found = found[skip:skip + limit] if limit else found[skip:]
        
        logger.debug(f"find matched {len(found)} documents")
        return [_project(copy.deepcopy(doc), projection, self.primary_key) for doc in found]
    
    async def count(self, filter: Mapping[str, Any]) -> int:
        self.count_calls += 1
        return sum(1 for doc in self._documents if matches(doc, filter))
