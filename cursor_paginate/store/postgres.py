"""Document store backed by a PostgreSQL JSONB table.

Filters in the document-store dialect are compiled to parameterized SQL.
Top-level columns are compared with their native types, anything else is
read from the ``body`` document as ``jsonb``.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

import asyncpg
from asyncpg import Pool

from ..errors.problem_details import BadRequestError, InternalServerError, ServiceUnavailableError
from ..pagination.cursor import is_uuid
from ..pagination.filters import parse_datetime
from ..pagination.paginator import CursorPaginationMixin
from .base import get_field


logger = logging.getLogger(__name__)

TABLE_NAME = "documents"

# Column name -> SQL type used to cast parameters
COLUMNS = {
    "id": "uuid",
    "collection": "text",
    "created_at": "timestamptz",
    "updated_at": "timestamptz",
}

SORTABLE_COLUMNS = ("id", "created_at", "updated_at")

PATH_SEGMENT = re.compile(r"^[A-Za-z0-9_\-]+$")

_COMPARISONS = {
    "$gt": ">",
    "$gte": ">=",
    "$lt": "<",
    "$lte": "<=",
}


class FilterCompiler:
    """Compile a store filter into a SQL condition with ``$n`` parameters."""
    
    def __init__(self, params: Optional[List[Any]] = None):
        self.params: List[Any] = params if params is not None else []
    
    def param(self, value: Any, cast: str) -> str:
        if cast == "jsonb":
            value = json.dumps(value, default=str)
        elif cast == "timestamptz" and isinstance(value, str):
            value = parse_datetime(value)
        self.params.append(value)
        return f"${len(self.params)}::{cast}"
    
    def field(self, path: str) -> Tuple[str, str]:
        """Return the SQL expression and type of a field path."""
        if path in COLUMNS:
            return path, COLUMNS[path]
        
        segments = path.split(".")
        if segments[0] == "body":
            segments = segments[1:]
        if not segments or not all(PATH_SEGMENT.match(s) for s in segments):
            raise BadRequestError(f"Invalid field path: '{path}'")
        
        self.params.append(segments)
        return f"(body #> ${len(self.params)}::text[])", "jsonb"
    
    def compile(self, filter: Mapping[str, Any]) -> str:
        clauses = []
        for key, condition in filter.items():
            if key == "$and":
                parts = [self.compile(sub) for sub in condition]
                clauses.append("(" + " AND ".join(parts) + ")" if parts else "TRUE")
            elif key == "$or":
                parts = [self.compile(sub) for sub in condition]
                clauses.append("(" + " OR ".join(parts) + ")" if parts else "FALSE")
            elif key.startswith("$"):
                raise BadRequestError(f"Unsupported filter operator: {key}")
            else:
                clauses.append(self._condition(key, condition))
        return " AND ".join(clauses) if clauses else "TRUE"
    
    def _condition(self, path: str, condition: Any) -> str:
        expr, cast = self.field(path)
        if isinstance(condition, Mapping) and any(k.startswith("$") for k in condition):
            parts = [self._operator(expr, cast, op, value) for op, value in condition.items()]
            return "(" + " AND ".join(parts) + ")"
        return self._operator(expr, cast, "$eq", condition)
    
    def _operator(self, expr: str, cast: str, operator: str, value: Any) -> str:
        if operator in _COMPARISONS:
            return f"{expr} {_COMPARISONS[operator]} {self.param(value, cast)}"
        if operator == "$eq":
            if value is None:
                return f"{expr} IS NULL"
            return f"{expr} = {self.param(value, cast)}"
        if operator == "$ne":
            if value is None:
                return f"{expr} IS NOT NULL"
            return f"{expr} IS DISTINCT FROM {self.param(value, cast)}"
        if operator in ("$in", "$nin"):
            values = list(value)
            if cast == "jsonb":
                values = [json.dumps(v, default=str) for v in values]
            elif cast == "timestamptz":
                values = [parse_datetime(v) if isinstance(v, str) else v for v in values]
            self.params.append(values)
            membership = f"{expr} = ANY(${len(self.params)}::{cast}[])"
            if operator == "$in":
                return membership
            return f"({expr} IS NULL OR NOT {membership})"
        if operator == "$exists":
            if cast != "jsonb":
                return "TRUE" if value else "FALSE"
            return f"{expr} IS NOT NULL" if value else f"{expr} IS NULL"
        raise BadRequestError(f"Unsupported filter operator: {operator}")
    
    def order_by(self, sort: Mapping[str, int]) -> str:
        terms = []
        for path, direction in sort.items():
            expr, _ = self.field(path)
            terms.append(f"{expr} {'DESC' if direction < 0 else 'ASC'}")
        return "ORDER BY " + ", ".join(terms) if terms else ""


def _select_columns(projection: Optional[Mapping[str, Any]]) -> str:
    all_columns = ["id", "collection", "body", "created_at", "updated_at"]
    if not projection:
        return ", ".join(all_columns)
    
    unknown = set(projection) - set(all_columns)
    if unknown:
        raise BadRequestError(f"Cannot project unknown columns: {sorted(unknown)}")
    
    included = {column for column, flag in projection.items() if flag}
    if included:
        selected = [c for c in all_columns if c in included or c == "id"]
    else:
        selected = [c for c in all_columns if c not in projection]
    return ", ".join(selected)


def _row_to_document(row: Any) -> Dict[str, Any]:
    document = dict(row)
    if isinstance(document.get("body"), str):
        document["body"] = json.loads(document["body"])
    return document


class PostgresDocumentStore(CursorPaginationMixin):
    """Documents of one collection in the ``documents`` table."""
    
    primary_key = "id"
    
    def __init__(self, pool: Pool, collection: str):
        self.pool = pool
        self.collection = collection
    
    def is_valid_key(self, value: str) -> bool:
        return is_uuid(value)
    
    def get_sort_value(self, record: Mapping[str, Any], path: str) -> Any:
        """Read a field path from a row the way ``FilterCompiler`` addresses it."""
        if path in COLUMNS:
            return record.get(path)
        if path.startswith("body."):
            path = path[len("body."):]
        return get_field(record.get("body") or {}, path)

    
    def _where(self, filter: Mapping[str, Any], compiler: FilterCompiler) -> str:
        collection_param = compiler.param(self.collection, "text")
        return f"WHERE collection = {collection_param} AND ({compiler.compile(filter)})"
    
    async def find(
        self,
        filter: Mapping[str, Any],
        projection: Optional[Mapping[str, Any]] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Fetch documents matching a filter.
        
        Args:
            filter: Store filter
            projection: Columns to include (1) or exclude (0)
            options: ``sort``, ``limit``, ``skip`` and ``timeout`` (seconds)
            
        Returns:
            Matching documents as dictionaries
            
        Raises:
            BadRequestError: If the filter cannot be compiled
            InternalServerError: If the query fails
            ServiceUnavailableError: If the query times out
        """
        options = options or {}
        compiler = FilterCompiler()
        
        query = f"SELECT {_select_columns(projection)} FROM {TABLE_NAME} {self._where(filter, compiler)}"
        order_clause = compiler.order_by(options.get("sort") or {})
        if order_clause:
            query += f" {order_clause}"
        if options.get("limit"):
            query += f" LIMIT {compiler.param(int(options['limit']), 'integer')}"
        if options.get("skip"):
            query += f" OFFSET {compiler.param(int(options['skip']), 'integer')}"
        
        rows = await self._run("fetch", query, compiler.params, options.get("timeout"))
        logger.debug(f"Fetched {len(rows)} documents from collection '{self.collection}'")
        return [_row_to_document(row) for row in rows]
    
    async def count(self, filter: Mapping[str, Any]) -> int:
        compiler = FilterCompiler()
        query = f"SELECT COUNT(*) FROM {TABLE_NAME} {self._where(filter, compiler)}"
        return await self._run("fetchval", query, compiler.params)
    
    async def _run(self, method: str, query: str, params: List[Any], timeout: Optional[float] = None):
        try:
            async with self.pool.acquire() as conn:
                return await getattr(conn, method)(query, *params, timeout=timeout)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error querying collection '{self.collection}': {e}")
            raise InternalServerError(f"Database error: {e}")
        except asyncio.TimeoutError:
            logger.error(f"Query on collection '{self.collection}' timed out")
            raise ServiceUnavailableError("Database query timed out")
