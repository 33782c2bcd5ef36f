"""
PostgreSQL document store: one JSONB table per collection

Tables live in a dedicated schema so that drop_database() can remove every
collection at once. Each table keeps the store-owned fields in columns:

    seq      BIGSERIAL     natural (insertion) order
    id       TEXT          primary key
    created  TIMESTAMPTZ   set on insert
    doc      JSONB         everything else
"""

import asyncio
import json
import logging
import re
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Tuple

import asyncpg

from blog_api.database.base import (
    Collection,
    DocumentDatabase,
    StoreError,
    nest_paths,
    new_document_id,
    strip_reserved,
    utc_now,
)

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]{0,62}$")
_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


def _check_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid collection or schema name: {name!r}")
    return name


def _row_to_document(row: asyncpg.Record) -> Dict[str, Any]:
    document = json.loads(row["doc"])
    document["id"] = row["id"]
    document["created"] = row["created"]
    return document


def _build_where(filters: Optional[Dict[str, Any]], first_param: int = 1) -> Tuple[str, List[Any]]:
    """Translate equality filters into a WHERE clause and its parameters"""
    if not filters:
        return "", []

    clauses = []
    params: List[Any] = []
    remaining = dict(filters)
    for column in ("id", "created"):
        if column in remaining:
            params.append(remaining.pop(column))
            clauses.append(f"{column} = ${first_param + len(params) - 1}")
    if remaining:
        params.append(json.dumps(nest_paths(remaining), default=str))
        clauses.append(f"doc @> ${first_param + len(params) - 1}::jsonb")

    return " WHERE " + " AND ".join(clauses), params


class PostgresCollection(Collection):
    """Collection stored as a table inside the database schema"""

    def __init__(self, name: str, database: "PostgresDatabase"):
        super().__init__(_check_identifier(name))
        self._database = database

    @property
    def table(self) -> str:
        return f'"{self._database.schema}"."{self.name}"'

    async def insert_one(self, document: Dict[str, Any]) -> Dict[str, Any]:
        inserted = await self.insert_many([document])
        return inserted[0]

    async def insert_many(self, documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        rows = [
            (new_document_id(), utc_now(), json.dumps(strip_reserved(document), default=str))
            for document in documents
        ]
        query = f"INSERT INTO {self.table} (id, created, doc) VALUES ($1, $2, $3::jsonb)"
        async with self._database.connection(self.name) as conn:
            async with conn.transaction():
                await conn.executemany(query, rows)
        return [
            {**strip_reserved(document), "id": doc_id, "created": created}
            for document, (doc_id, created, _) in zip(documents, rows)
        ]

    async def find(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        where, params = _build_where(filters)
        query = f"SELECT id, created, doc FROM {self.table}{where} ORDER BY seq"
        async with self._database.connection(self.name) as conn:
            rows = await conn.fetch(query, *params)
        return [_row_to_document(row) for row in rows]

    async def find_by_id(self, document_id: str) -> Optional[Dict[str, Any]]:
        return await self.find_one({"id": document_id})

    async def find_one(self, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        where, params = _build_where(filters)
        query = f"SELECT id, created, doc FROM {self.table}{where} ORDER BY seq LIMIT 1"
        async with self._database.connection(self.name) as conn:
            row = await conn.fetchrow(query, *params)
        return _row_to_document(row) if row else None

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        where, params = _build_where(filters)
        async with self._database.connection(self.name) as conn:
            return await conn.fetchval(f"SELECT count(*) FROM {self.table}{where}", *params)

    async def update_by_id(self, document_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        fields = strip_reserved(fields)
        if not fields:
            return await self.find_by_id(document_id)

        # Chain jsonb_set calls so the whole update is one statement
        expression = "doc"
        params: List[Any] = [document_id]
        for path, value in fields.items():
            params.extend([path.split("."), json.dumps(value, default=str)])
            expression = f"jsonb_set({expression}, ${len(params) - 1}::text[], ${len(params)}::jsonb)"

        query = f"UPDATE {self.table} SET doc = {expression} WHERE id = $1 RETURNING id, created, doc"
        async with self._database.connection(self.name) as conn:
            row = await conn.fetchrow(query, *params)
        return _row_to_document(row) if row else None

    async def delete_by_id(self, document_id: str) -> bool:
        async with self._database.connection(self.name) as conn:
            status = await conn.execute(f"DELETE FROM {self.table} WHERE id = $1", document_id)
        # asyncpg returns the command tag, e.g. "DELETE 1"
        return status.split()[-1] != "0"


class PostgresDatabase(DocumentDatabase):
    """asyncpg pool plus lazily created collection tables"""

    def __init__(
        self,
        dsn: str,
        schema: str = "documents",
        min_size: int = 2,
        max_size: int = 10,
        command_timeout: float = 60,
    ):
        self.dsn = dsn
        self.schema = _check_identifier(schema)
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self._pool: Optional[asyncpg.Pool] = None
        self._ready_tables: set = set()
        self._schema_lock = asyncio.Lock()

    async def connect(self) -> None:
        try:
            self._pool = await asyncpg.create_pool(
                self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout,
                statement_cache_size=0  # Fix for pgbouncer compatibility
            )
            async with self._pool.acquire() as conn:
                await conn.execute(f'CREATE SCHEMA IF NOT EXISTS "{self.schema}"')
        except _DRIVER_ERRORS as e:
            raise StoreError(f"Failed to connect to PostgreSQL: {e}") from e

        logger.info("Database initialized successfully")

    async def close(self) -> None:
        if self._pool:
            await self._pool.close()
            self._pool = None
        self._ready_tables.clear()
        logger.info("Database connections closed")

    async def ping(self) -> None:
        async with self.connection() as conn:
            await conn.fetchval("SELECT 1")

    def collection(self, name: str) -> PostgresCollection:
        return PostgresCollection(name, self)

    async def drop_database(self) -> None:
        async with self.connection() as conn:
            await conn.execute(f'DROP SCHEMA IF EXISTS "{self.schema}" CASCADE')
            await conn.execute(f'CREATE SCHEMA "{self.schema}"')
        self._ready_tables.clear()
        logger.info(f"Dropped document schema {self.schema}")

    async def _ensure_table(self, conn: asyncpg.Connection, name: str) -> None:
        if name in self._ready_tables:
            return
        async with self._schema_lock:
            if name in self._ready_tables:
                return
            await conn.execute(
                f'CREATE TABLE IF NOT EXISTS "{self.schema}"."{name}" ('
                "seq BIGSERIAL, "
                "id TEXT PRIMARY KEY, "
                "created TIMESTAMPTZ NOT NULL, "
                "doc JSONB NOT NULL)"
            )
            self._ready_tables.add(name)

    @asynccontextmanager
    async def connection(self, collection: Optional[str] = None):
        """
        Acquire a pooled connection, translating driver failures to StoreError

        When a collection name is given its table is created first if needed.
        """
        if self._pool is None:
            raise StoreError("Database pool not initialized")
        try:
            async with self._pool.acquire() as conn:
                if collection:
                    await self._ensure_table(conn, collection)
                yield conn
        except _DRIVER_ERRORS as e:
            logger.error(f"PostgreSQL operation failed: {e}")
            raise StoreError(str(e)) from e
