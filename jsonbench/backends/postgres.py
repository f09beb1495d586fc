"""
PostgreSQL backend: `json` versus `jsonb` columns.

Provisions two structurally identical tables, `test_json` and `test_jsonb`,
differing only in the type of the `value` column, and implements the timed
operations against them:

- insert:        INSERT of the raw text (json) or the parsed document (jsonb)
- read_document: SELECT value ... WHERE id = $1
- read_field:    SELECT value -> $field ... WHERE id = $1
- write_field:   UPDATE ... SET value = jsonb_set(value, ARRAY[$field], $sentinel)

In-place field mutation is only offered for jsonb; a json column would have to
be reparsed and rewritten whole.
"""

from __future__ import annotations

from typing import Any, List, Optional

import psycopg
from psycopg import sql
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from jsonbench.backends.abstract import AbstractStorageBackend
from jsonbench.config import Settings, get_settings
from jsonbench.domain.models import Phase, Representation
from jsonbench.errors import SchemaProvisioningError
from jsonbench.infrastructure.db_factory import build_dsn, create_async_pool
from jsonbench.utils.logging import get_logger

log = get_logger(__name__)


class PostgresBackend(AbstractStorageBackend):
    """
    Benchmark backend over a psycopg AsyncConnectionPool.

    The pool is created by `open()` unless one is injected; either way the
    backend closes it in `close()`.
    """

    name: str = "postgres"
    description: str = "PostgreSQL json (text) vs jsonb (parsed, indexed) columns."

    def __init__(
        self,
        settings: Optional[Settings] = None,
        dsn_override: Optional[str] = None,
        pool: Optional[AsyncConnectionPool] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._dsn_override = dsn_override
        self._pool: Optional[AsyncConnectionPool] = pool
        self.schema = self.settings.db_schema

    # lifecycle

    async def open(self) -> None:
        if self._pool is not None:
            return
        log.info("Connecting to Postgres database...", extra={"backend": self.name})
        self._pool = await create_async_pool(
            conninfo=self._dsn_override or build_dsn(self.settings),
            min_size=self.settings.db_pool_min_size,
            max_size=self.settings.db_pool_max_size,
        )

    async def close(self) -> None:
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        await pool.close()

    def _require_pool(self) -> AsyncConnectionPool:
        if self._pool is None:
            raise RuntimeError("PostgresBackend is not open; call open() first")
        return self._pool

    # schema

    def _table(self, representation: Representation) -> sql.Identifier:
        return sql.Identifier(self.schema, representation.table)

    def _reset_statements(self) -> List[sql.Composed]:
        schema = sql.Identifier(self.schema)
        return [
            sql.SQL("DROP SCHEMA IF EXISTS {} CASCADE").format(schema),
            sql.SQL("CREATE SCHEMA {}").format(schema),
            sql.SQL("GRANT ALL ON SCHEMA {} TO {}").format(
                schema, sql.Identifier(self.settings.db_user)
            ),
            sql.SQL("GRANT ALL ON SCHEMA {} TO public").format(schema),
            sql.SQL("REVOKE USAGE ON SCHEMA {} FROM public").format(schema),
        ]

    def _create_statements(self, representation: Representation) -> List[sql.Composed]:
        table = self._table(representation)
        name = representation.table
        return [
            sql.SQL("CREATE TABLE {} (id SERIAL NOT NULL, key text NOT NULL, value {} NOT NULL)").format(
                table, sql.SQL(representation.value)
            ),
            sql.SQL("CREATE UNIQUE INDEX {} ON {} (id)").format(
                sql.Identifier(f"{name}_id_uindex"), table
            ),
            sql.SQL("CREATE UNIQUE INDEX {} ON {} (key)").format(
                sql.Identifier(f"{name}_key_uindex"), table
            ),
            sql.SQL("ALTER TABLE {} ADD CONSTRAINT {} PRIMARY KEY (id)").format(
                table, sql.Identifier(f"{name}_pk")
            ),
        ]

    async def provision_schema(self) -> None:
        """
        Reset the schema to empty, then create one table per representation.

        Reset failures (e.g. the schema does not exist yet, or the user lacks
        ownership) are logged and ignored. Creation failures raise
        SchemaProvisioningError.
        """
        pool = self._require_pool()

        log.info("Resetting Postgres schema back to vanilla...", extra={"schema": self.schema})
        async with pool.connection() as conn:
            try:
                for statement in self._reset_statements():
                    await conn.execute(statement)
            except psycopg.Error as exc:
                log.warning(
                    f"[SCHEMA RESET] {exc}",
                    extra={"schema": self.schema, "error_type": type(exc).__name__},
                )

        log.info("Creating tables for Postgres database...", extra={"schema": self.schema})
        async with pool.connection() as conn:
            for representation in Representation:
                try:
                    for statement in self._create_statements(representation):
                        await conn.execute(statement)
                except psycopg.Error as exc:
                    raise SchemaProvisioningError(
                        f"creating {representation.table} failed: {exc}"
                    ) from exc

    # operations

    async def _fetchone(self, query: sql.Composable, params: tuple) -> Optional[tuple]:
        async with self._require_pool().connection() as conn:
            cur = await conn.execute(query, params)
            return await cur.fetchone()

    async def insert(self, representation: Representation, key: str, value: Any) -> None:
        if representation is Representation.INDEXED:
            query = sql.SQL("INSERT INTO {} (key, value) VALUES (%s, %s)").format(
                self._table(representation)
            )
            params: tuple = (key, Jsonb(value))
        else:
            query = sql.SQL("INSERT INTO {} (key, value) VALUES (%s, %s::json)").format(
                self._table(representation)
            )
            params = (key, value)
        async with self._require_pool().connection() as conn:
            await conn.execute(query, params)

    async def read_document(self, representation: Representation, identifier: int) -> Optional[Any]:
        query = sql.SQL("SELECT value FROM {} WHERE id = %s").format(self._table(representation))
        row = await self._fetchone(query, (identifier,))
        return row[0] if row else None

    async def read_field(self, representation: Representation, identifier: int, field: str) -> Any:
        query = sql.SQL("SELECT value -> %s::text FROM {} WHERE id = %s").format(
            self._table(representation)
        )
        row = await self._fetchone(query, (field, identifier))
        return row[0] if row else None

    async def write_field(
        self, representation: Representation, identifier: int, field: str, value: Any
    ) -> None:
        if not self.supports(representation, Phase.PARTIAL_WRITE):
            raise NotImplementedError(
                f"in-place field writes are not supported for {representation.value}"
            )
        query = sql.SQL(
            "UPDATE {} SET value = jsonb_set(value, ARRAY[%s::text], %s) WHERE id = %s"
        ).format(self._table(representation))
        async with self._require_pool().connection() as conn:
            await conn.execute(query, (field, Jsonb(value), identifier))

    async def count_rows(self, representation: Representation) -> int:
        query = sql.SQL("SELECT count(*) FROM {}").format(self._table(representation))
        row = await self._fetchone(query, ())
        return int(row[0]) if row else 0

    def supports(self, representation: Representation, phase: Phase) -> bool:
        if phase is Phase.PARTIAL_WRITE:
            return representation is Representation.INDEXED
        return True


__all__ = ["PostgresBackend"]
