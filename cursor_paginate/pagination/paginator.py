"""Keyset pagination over a document store."""

import asyncio
import functools
import logging
from typing import Any, Dict, Optional

from .cursor import DecodedCursor, KeyValidator, decode_cursor, encode_cursor, is_object_id
from .direction import DirectionPair, is_reversed, resolve_directions
from .filters import Filter, ParseSortValueFn, build_filters_from_cursor, stringify_sort_value
from .models import PaginatedResult, PaginationParams, QueryDirective
from ..store.base import DocumentStore, get_field


logger = logging.getLogger(__name__)


def build_query(
    pagination: PaginationParams,
    primary_key: str,
    parse_sort_value: Optional[ParseSortValueFn] = None,
    base_filters: Optional[Filter] = None,
    key_validator: KeyValidator = is_object_id
) -> QueryDirective:
    """Resolve the filter, sort and direction of the current fetch.
    
    A cursor that fails to decode leaves the fetch unfiltered, but the
    requested traversal mode still drives the sort direction and the
    reverse flag.
    """
    mode = pagination.mode
    order = resolve_directions(pagination.order, mode)
    sort_by = pagination.sort_by or primary_key
    cursor = decode_cursor(pagination.cursor, key_validator)
    
    filter, sort = build_filters_from_cursor(
        cursor,
        order.current,
        sort_by,
        primary_key,
        parse_sort_value,
        base_filters
    )
    
    return QueryDirective(
        filter=filter,
        sort=sort,
        limit=pagination.limit,
        reverse=is_reversed(mode),
        sort_by=sort_by,
        order=order
    )


def _cursor_for(store: DocumentStore, record: Any, primary_key: str, sort_by: str) -> DecodedCursor:
    key = get_field(record, primary_key)
    if key is None:
        raise ValueError(
            f"Record has no '{primary_key}' field, a projection must keep the primary key"
        )

    value = None
    if sort_by != primary_key:
        # Stores that map field paths onto their records resolve sort values themselves
        get_sort_value = getattr(store, "get_sort_value", None)
        if get_sort_value is not None:
            value = get_sort_value(record, sort_by)
        else:
            value = get_field(record, sort_by)
        value = stringify_sort_value(value)
    # Built from trusted store data, skip key format validation
    return DecodedCursor.model_construct(id=str(key), v=value)


async def _probe(
    store: DocumentStore,
    cursor: DecodedCursor,
    pair: DirectionPair,
    query: QueryDirective,
    primary_key: str,
    parse_sort_value: Optional[ParseSortValueFn],
    base_filters: Optional[Filter]
) -> int:
    """Count every record strictly beyond a boundary record."""
    filter, _ = build_filters_from_cursor(
        cursor,
        pair,
        query.sort_by,
        primary_key,
        parse_sort_value,
        base_filters
    )
    return await store.count(filter)


async def paginate(
    store: DocumentStore,
    pagination: PaginationParams,
    filters: Optional[Filter] = None,
    parse_sort_value: Optional[ParseSortValueFn] = None,
    projection: Optional[Dict[str, Any]] = None,
    query_opts: Optional[Dict[str, Any]] = None
) -> PaginatedResult:
    """Fetch one page of records and the cursors around it.
    
    Issues one ``find`` and up to two ``count`` probes. The probe counts
    cover everything before and after the page, so ``total_count`` is the
    number of records matching ``filters`` whichever page is requested.
    Store failures propagate unchanged.

    Args:
        store: Store to query
        pagination: Validated pagination fields
        filters: Additional filters narrowing the search
        parse_sort_value: Converts a cursor's text sort value to its native type
        projection: Projection forwarded to ``find``. It must keep the
            primary key and the sort field, cursors are built from them
        query_opts: Extra ``find`` options, ``sort`` and ``limit`` always win
        
    Returns:
        The requested page
        
    Raises:
        ValueError: If a returned record has no primary key
    """
    primary_key = store.primary_key
    query = build_query(
        pagination,
        primary_key,
        parse_sort_value,
        filters,
        key_validator=store.is_valid_key
    )
    
    options = {**(query_opts or {}), "sort": query.sort, "limit": query.limit}
    docs = list(await store.find(query.filter, projection, options))
    if query.reverse:
        docs.reverse()
    
    next_cursor: Optional[DecodedCursor] = None
    prev_cursor: Optional[DecodedCursor] = None
    next_count = prev_count = 0
    
    if docs:
        probe = functools.partial(
            _probe,
            store,
            query=query,
            primary_key=primary_key,
            parse_sort_value=parse_sort_value,
            base_filters=filters
        )
        
        # A short page has nothing after it
        if len(docs) == pagination.limit:
            next_cursor = _cursor_for(store, docs[-1], primary_key, query.sort_by)
        prev_cursor = _cursor_for(store, docs[0], primary_key, query.sort_by)
        
        if next_cursor is not None:
            next_count, prev_count = await asyncio.gather(
                probe(next_cursor, query.order.next),
                probe(prev_cursor, query.order.prev)
            )
        else:
            prev_count = await probe(prev_cursor, query.order.prev)
        
        if not next_count:
            next_cursor = None
        if not prev_count:
            prev_cursor = None
    
    total_count = len(docs) + next_count + prev_count
    logger.debug(
        f"Paginated {len(docs)} records ({pagination.mode.value}, {pagination.order.value} "
        f"by {query.sort_by}): {prev_count} before, {next_count} after"
    )
    
    return PaginatedResult(
        data=docs,
        total_count=total_count,
        next_cursor=encode_cursor(next_cursor) if next_cursor else None,
        prev_cursor=encode_cursor(prev_cursor) if prev_cursor else None
    )


class CursorPaginationMixin:
    """Gives a store class a ``paginate`` method bound to itself."""
    
    async def paginate(
        self,
        pagination: PaginationParams,
        filters: Optional[Filter] = None,
        parse_sort_value: Optional[ParseSortValueFn] = None,
        projection: Optional[Dict[str, Any]] = None,
        query_opts: Optional[Dict[str, Any]] = None
    ) -> PaginatedResult:
        return await paginate(
            self,
            pagination,
            filters=filters,
            parse_sort_value=parse_sort_value,
            projection=projection,
            query_opts=query_opts
        )


def paginate_plugin(store: DocumentStore) -> DocumentStore:
    """Attach a ``paginate`` coroutine bound to an existing store object."""
    store.paginate = functools.partial(paginate, store)
    return store
