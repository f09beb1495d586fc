from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any, Callable, Optional

import psycopg
import pytest
from psycopg.types.json import Jsonb

from jsonbench.backends.postgres import PostgresBackend
from jsonbench.config import Settings
from jsonbench.domain.models import Phase, Representation
from jsonbench.errors import SchemaProvisioningError

STATEMENTS_PER_TABLE = 4


class _FakeCursor:
    def __init__(self, row: Optional[tuple]) -> None:
        self._row = row

    async def fetchone(self) -> Optional[tuple]:
        return self._row


class _FakeConnection:
    def __init__(self, fail_when: Callable[[str], bool], row: Optional[tuple]) -> None:
        self.executed: list[tuple[str, Any]] = []
        self._fail_when = fail_when
        self._row = row

    async def execute(self, query: Any, params: Any = None) -> _FakeCursor:
        text = repr(query)
        self.executed.append((text, params))
        if self._fail_when(text):
            raise psycopg.OperationalError(f"failed: {text[:40]}")
        return _FakeCursor(self._row)


class _ConnectionContext(AbstractAsyncContextManager[_FakeConnection]):
    def __init__(self, conn: _FakeConnection) -> None:
        self._conn = conn

    async def __aenter__(self) -> _FakeConnection:
        return self._conn

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        del exc_type, exc, tb
        return False


class _FakePool:
    def __init__(
        self, fail_when: Callable[[str], bool] = lambda _: False, row: Optional[tuple] = None
    ) -> None:
        self.conn = _FakeConnection(fail_when, row)
        self.closed = False

    def connection(self) -> _ConnectionContext:
        return _ConnectionContext(self.conn)

    async def close(self) -> None:
        self.closed = True


def _backend(pool: _FakePool) -> PostgresBackend:
    return PostgresBackend(settings=Settings(db_schema="bench"), pool=pool)  # type: ignore[arg-type]


def _count(pool: _FakePool, fragment: str) -> int:
    return sum(1 for text, _ in pool.conn.executed if fragment in text)


@pytest.mark.asyncio
async def test_provision_swallows_reset_errors_and_creates_tables() -> None:
    pool = _FakePool(fail_when=lambda text: "DROP SCHEMA" in text)

    await _backend(pool).provision_schema()

    assert _count(pool, "DROP SCHEMA") == 1
    assert _count(pool, "CREATE SCHEMA") == 0
    assert _count(pool, "CREATE TABLE") == len(Representation)
    assert _count(pool, "CREATE UNIQUE INDEX") == 2 * len(Representation)
    assert _count(pool, "PRIMARY KEY") == len(Representation)


@pytest.mark.asyncio
async def test_provision_runs_full_reset_sequence() -> None:
    pool = _FakePool()

    await _backend(pool).provision_schema()

    executed = [text for text, _ in pool.conn.executed]
    assert "DROP SCHEMA" in executed[0]
    assert "REVOKE USAGE" in executed[4]
    assert len(executed) == 5 + STATEMENTS_PER_TABLE * len(Representation)
    assert any("test_json'" in text and "json" in text for text in executed)
    assert any("test_jsonb'" in text for text in executed)


@pytest.mark.asyncio
async def test_provision_table_creation_failure_is_fatal() -> None:
    pool = _FakePool(fail_when=lambda text: "CREATE TABLE" in text)

    with pytest.raises(SchemaProvisioningError, match="test_json"):
        await _backend(pool).provision_schema()


@pytest.mark.asyncio
async def test_insert_passes_raw_text_and_parsed_document() -> None:
    pool = _FakePool()
    backend = _backend(pool)

    await backend.insert(Representation.TEXT, "key-1", '{"a":1}')
    await backend.insert(Representation.INDEXED, "key-1", {"a": 1})

    (_, text_params), (_, indexed_params) = pool.conn.executed
    assert text_params == ("key-1", '{"a":1}')
    assert indexed_params[0] == "key-1"
    assert isinstance(indexed_params[1], Jsonb)
    assert indexed_params[1].obj == {"a": 1}


@pytest.mark.asyncio
async def test_read_document_returns_none_for_missing_row() -> None:
    backend = _backend(_FakePool(row=None))
    assert await backend.read_document(Representation.INDEXED, 99) is None


@pytest.mark.asyncio
async def test_read_field_returns_extracted_value() -> None:
    pool = _FakePool(row=(1,))

    value = await _backend(pool).read_field(Representation.TEXT, 3, "a")

    assert value == 1
    assert pool.conn.executed[0][1] == ("a", 3)


@pytest.mark.asyncio
async def test_write_field_uses_jsonb_set_on_indexed_only() -> None:
    pool = _FakePool()
    backend = _backend(pool)

    await backend.write_field(Representation.INDEXED, 2, "a", "sentinel")
    text, params = pool.conn.executed[0]
    assert "jsonb_set" in text
    assert params[0] == "a" and params[2] == 2
    assert params[1].obj == "sentinel"

    with pytest.raises(NotImplementedError):
        await backend.write_field(Representation.TEXT, 2, "a", "sentinel")


def test_partial_write_is_only_supported_for_jsonb() -> None:
    backend = _backend(_FakePool())
    assert backend.supports(Representation.INDEXED, Phase.PARTIAL_WRITE)
    assert not backend.supports(Representation.TEXT, Phase.PARTIAL_WRITE)
    for phase in (Phase.INSERT, Phase.FULL_READ, Phase.PARTIAL_READ):
        assert all(backend.supports(r, phase) for r in Representation)


@pytest.mark.asyncio
async def test_close_releases_pool_once() -> None:
    pool = _FakePool()
    backend = _backend(pool)

    await backend.close()
    await backend.close()

    assert pool.closed is True
    with pytest.raises(RuntimeError, match="not open"):
        await backend.count_rows(Representation.TEXT)


@pytest.mark.asyncio
async def test_open_uses_pool_factory(monkeypatch) -> None:
    pool = _FakePool()
    captured: dict[str, Any] = {}

    async def fake_create_async_pool(**kwargs: Any) -> _FakePool:
        captured.update(kwargs)
        return pool

    monkeypatch.setattr("jsonbench.backends.postgres.create_async_pool", fake_create_async_pool)
    backend = PostgresBackend(settings=Settings(db_pool_max_size=2), dsn_override="postgresql://test")

    await backend.open()
    await backend.count_rows(Representation.INDEXED)

    assert captured["conninfo"] == "postgresql://test"
    assert captured["max_size"] == 2
