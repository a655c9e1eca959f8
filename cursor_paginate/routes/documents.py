"""Paginated document listing endpoint."""

import logging
from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from ..db.connection import get_db_pool
from ..pagination import (
    PaginatedResult,
    PaginationParams,
    SortOrder,
    create_link_header,
    paginate,
    parse_datetime
)
from ..pagination.models import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..store.base import DocumentStore
from ..store.postgres import PostgresDocumentStore


logger = logging.getLogger(__name__)

SortField = Literal["id", "created_at", "updated_at"]

# Cursor values of timestamp columns travel as ISO 8601 text
SORT_VALUE_PARSERS = {
    "created_at": parse_datetime,
    "updated_at": parse_datetime,
}

documents_router = APIRouter(
    prefix="/collections/{collection_name}/documents",
    tags=["Documents"],
    responses={
        422: {"description": "Invalid pagination parameters"},
        503: {"description": "Service Unavailable"}
    }
)


async def get_document_store(collection_name: str) -> DocumentStore:
    """Store serving the documents of one collection."""
    pool = await get_db_pool()
    return PostgresDocumentStore(pool, collection_name)


def get_pagination_params(
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE, description="Number of documents per page")] = DEFAULT_PAGE_SIZE,
    order: Annotated[SortOrder, Query(description="Sort order")] = SortOrder.DESC,
    sort_by: Annotated[Optional[SortField], Query(alias="sortBy", description="Field to sort by")] = None,
    next_cursor: Annotated[Optional[str], Query(alias="nextCursor", description="Cursor for the next page")] = None,
    prev_cursor: Annotated[Optional[str], Query(alias="prevCursor", description="Cursor for the previous page")] = None
) -> PaginationParams:
    return PaginationParams(
        limit=limit,
        order=order,
        sort_by=sort_by,
        next_cursor=next_cursor,
        prev_cursor=prev_cursor
    )


@documents_router.get(
    "",
    response_model=PaginatedResult,
    summary="List documents",
    description="List documents of a collection with keyset pagination in both directions."
)
async def list_documents(
    collection_name: str,
    request: Request,
    response: Response,
    pagination: Annotated[PaginationParams, Depends(get_pagination_params)],
    store: Annotated[DocumentStore, Depends(get_document_store)]
) -> PaginatedResult:
    """List one page of documents.
    
    Documents are ordered by ``sortBy`` (the primary key by default) with
    the primary key breaking ties. ``totalCount`` is the size of the whole
    collection, whichever page is returned.
    """
    logger.info(f"Listing documents of collection '{collection_name}' ({pagination.mode.value})")
    
    result = await paginate(
        store,
        pagination,
        parse_sort_value=SORT_VALUE_PARSERS.get(pagination.sort_by)
    )
    
    link_header = create_link_header(
        base_url=str(request.url).split("?")[0],
        params={
            "limit": pagination.limit,
            "order": pagination.order.value,
            "sortBy": pagination.sort_by
        },
        next_cursor=result.next_cursor,
        prev_cursor=result.prev_cursor
    )
    if link_header:
        response.headers["Link"] = link_header
    
    logger.info(f"Returned {len(result.data)} of {result.total_count} documents from '{collection_name}'")
    return result
