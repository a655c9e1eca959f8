"""Pagination against a live PostgreSQL database."""

import json
import os
import uuid
from datetime import datetime, timedelta, timezone

import asyncpg
import pytest

from cursor_paginate.config import get_settings
from cursor_paginate.pagination import PaginationParams, parse_datetime
from cursor_paginate.store.postgres import PostgresDocumentStore


BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS documents (
        id uuid PRIMARY KEY,
        collection text NOT NULL,
        body jsonb NOT NULL,
        created_at timestamptz NOT NULL DEFAULT now(),
        updated_at timestamptz NOT NULL DEFAULT now()
    )
"""


def get_database_url() -> str:
    return os.environ.get("TEST_DATABASE_URL", get_settings().database_url)


@pytest.fixture
async def db_pool():
    pool = await asyncpg.create_pool(get_database_url(), min_size=1, max_size=4)
    async with pool.acquire() as conn:
        await conn.execute(CREATE_TABLE)
    yield pool
    await pool.close()


@pytest.fixture
async def collection(db_pool):
    """A fresh collection of 25 documents, removed afterwards."""
    name = f"test-{uuid.uuid4().hex}"
    rows = [
        (
            uuid.uuid4(),
            name,
            json.dumps({"n": i, "kind": "even" if i % 2 == 0 else "odd"}),
            BASE_TIME + timedelta(minutes=i // 2),
            BASE_TIME + timedelta(minutes=i)
        )
        for i in range(1, 26)
    ]
    async with db_pool.acquire() as conn:
        await conn.executemany(
            "INSERT INTO documents (id, collection, body, created_at, updated_at) "
            "VALUES ($1, $2, $3::jsonb, $4, $5)",
            rows
        )
    yield name, rows
    async with db_pool.acquire() as conn:
        await conn.execute("DELETE FROM documents WHERE collection = $1", name)


async def walk(store, parse_sort_value=None, **params):
    """Follow next cursors to the end, returning every page."""
    pages = []
    pagination = PaginationParams(**params)
    while True:
        result = await store.paginate(pagination, parse_sort_value=parse_sort_value)
        pages.append(result)
        if result.next_cursor is None:
            return pages
        pagination = PaginationParams(**params, next_cursor=result.next_cursor)


class TestPostgresPagination:
    """Keyset traversal over the documents table."""
    
    @pytest.mark.parametrize("order", ["asc", "desc"])
    async def test_traverse_by_id(self, db_pool, collection, order):
        name, rows = collection
        store = PostgresDocumentStore(db_pool, name)
        
        pages = await walk(store, limit=10, order=order)
        
        seen = [doc["id"] for page in pages for doc in page.data]
        assert seen == sorted((row[0] for row in rows), reverse=order == "desc")
        assert [len(page.data) for page in pages] == [10, 10, 5]
        assert all(page.total_count == 25 for page in pages)
    
    async def test_traverse_by_created_at_with_ties(self, db_pool, collection):
        name, rows = collection
        store = PostgresDocumentStore(db_pool, name)
        
        pages = await walk(store, parse_sort_value=parse_datetime, limit=4, order="asc", sort_by="created_at")
        
        seen = [doc["id"] for page in pages for doc in page.data]
        expected = [row[0] for row in sorted(rows, key=lambda row: (row[3], row[0]))]
        assert seen == expected
    
    async def test_prev_cursor_returns_previous_page(self, db_pool, collection):
        name, _ = collection
        store = PostgresDocumentStore(db_pool, name)
        
        first = await store.paginate(PaginationParams(limit=10, sort_by="updated_at"), parse_sort_value=parse_datetime)
        second = await store.paginate(
            PaginationParams(limit=10, sort_by="updated_at", next_cursor=first.next_cursor),
            parse_sort_value=parse_datetime
        )
        back = await store.paginate(
            PaginationParams(limit=10, sort_by="updated_at", prev_cursor=second.prev_cursor),
            parse_sort_value=parse_datetime
        )
        
        assert [doc["id"] for doc in back.data] == [doc["id"] for doc in first.data]
        assert back.prev_cursor is None
    
    async def test_filters_on_body(self, db_pool, collection):
        name, _ = collection
        store = PostgresDocumentStore(db_pool, name)
        
        result = await store.paginate(PaginationParams(limit=5), filters={"body.kind": "even"})
        
        assert result.total_count == 12
        assert all(doc["body"]["kind"] == "even" for doc in result.data)
    
    async def test_unknown_collection_is_empty(self, db_pool):
        store = PostgresDocumentStore(db_pool, f"missing-{uuid.uuid4().hex}")
        
        result = await store.paginate(PaginationParams())
        
        assert result.data == []
        assert result.total_count == 0
