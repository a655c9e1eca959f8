"""Store filters and sort specifications derived from a cursor."""

import json
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional, Tuple, Union
from uuid import UUID

from .cursor import DecodedCursor
from .direction import DirectionPair


SortValue = Union[str, int, float, datetime, date, UUID, None]
ParseSortValueFn = Callable[[str], SortValue]

Filter = Dict[str, Any]
SortSpec = Dict[str, int]


def stringify_sort_value(value: Any) -> Optional[str]:
    """Convert a sort field value into the text stored in a cursor."""
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return json.dumps(value)
    return str(value)


def parse_datetime(value: str) -> datetime:
    """Parse an ISO 8601 cursor value back into a datetime."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` cursor value back into a date."""
    return date.fromisoformat(value)



def parse_number(value: str) -> Union[int, float]:
    """Parse a numeric cursor value, keeping integers integral."""
    try:
        return int(value)
    except ValueError:
        return float(value)


def parse_uuid(value: str) -> UUID:
    """Parse a UUID cursor value."""
    return UUID(value)


def build_sort(sort_by: str, primary_key: str, direction: int) -> SortSpec:
    """Sort by the requested field, with the primary key as tiebreaker."""
    if sort_by == primary_key:
        return {primary_key: direction}
    return {sort_by: direction, primary_key: direction}


def build_filters_from_cursor(
    cursor: Optional[DecodedCursor],
    pair: DirectionPair,
    sort_by: str,
    primary_key: str,
    parse_sort_value: Optional[ParseSortValueFn] = None,
    base_filters: Optional[Filter] = None
) -> Tuple[Filter, SortSpec]:
    """Build the filter and sort selecting records beyond a cursor.
    
    Base filters are ANDed with the cursor clause. They must not constrain
    the primary key or the sort field themselves, since only one secondary
    sort field plus the primary key tiebreaker is supported.
    
    Args:
        cursor: Decoded cursor, or None for an unfiltered page
        pair: Sort direction and comparison operator to apply
        sort_by: Field the results are ordered by
        primary_key: Store-native unique key field
        parse_sort_value: Converts the cursor's text value to its native type
        base_filters: Additional caller filters
        
    Returns:
        Tuple of (filter, sort)
    """
    direction, operator = pair
    sort = build_sort(sort_by, primary_key, direction)
    
    if cursor is None:
        return dict(base_filters or {}), sort
    
    if cursor.v is not None:
        # Secondary values may repeat, so ties fall back to the primary key
        value = parse_sort_value(cursor.v) if parse_sort_value else cursor.v
        clause = {
            "$or": [
                {sort_by: {operator: value}},
                {sort_by: value, primary_key: {operator: cursor.id}},
            ]
        }
    else:
        clause = {primary_key: {operator: cursor.id}}
    
    if base_filters:
        return {"$and": [clause, base_filters]}, sort
    return clause, sort
