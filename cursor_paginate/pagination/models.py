"""Request and result models for cursor pagination."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .direction import DirectionTriple, SortOrder, TraversalMode


DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


class PaginationParams(BaseModel):
    """Pagination fields of a list request.
    
    When both cursors are present ``prev_cursor`` wins and ``next_cursor``
    is ignored.
    """
    
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Max number of items per page")
    order: SortOrder = Field(default=SortOrder.DESC, description="Sort order")
    sort_by: Optional[str] = Field(
        default=None,
        min_length=1,
        description="Field to sort by, defaults to the primary key. Needs a compound index with the primary key."
    )
    next_cursor: Optional[str] = Field(default=None, description="Cursor of the last item of the previous page")
    prev_cursor: Optional[str] = Field(default=None, description="Cursor of the first item of the current page")
    
    @property
    def mode(self) -> TraversalMode:
        """Traversal mode implied by the supplied cursors."""
        if self.prev_cursor:
            return TraversalMode.BACKWARD
        if self.next_cursor:
            return TraversalMode.FORWARD
        return TraversalMode.INITIAL
    
    @property
    def cursor(self) -> Optional[str]:
        """The token governing this request."""
        if self.prev_cursor:
            return self.prev_cursor
        return self.next_cursor or None


class QueryDirective(BaseModel):
    """Fully resolved instruction for the current fetch."""
    
    filter: Dict[str, Any]
    sort: Dict[str, int]
    limit: int
    reverse: bool = False
    sort_by: str
    order: DirectionTriple


class PaginatedResult(BaseModel):
    """One page of records with the tokens to reach its neighbours."""
    
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    
    data: List[Any] = Field(description="Records of the page in caller-facing order")
    total_count: int = Field(description="Number of records matching the filters")
    next_cursor: Optional[str] = Field(default=None, description="Cursor for the next page")
    prev_cursor: Optional[str] = Field(default=None, description="Cursor for the previous page")
