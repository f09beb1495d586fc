"""
Pytest configuration for the JSON storage benchmark.

Provides fixtures for:
- An in-memory storage backend for unit-testing the phases
- Fixture directories and benchmark settings
- Database connection management for integration tests
"""

from __future__ import annotations

import copy
import io
import json
import os
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Tuple

import psycopg
import pytest
from rich.console import Console

from jsonbench.backends.abstract import AbstractStorageBackend
from jsonbench.config import Settings
from jsonbench.domain.models import Phase, Representation


class InMemoryBackend(AbstractStorageBackend):
    """
    Dict-backed stand-in for PostgresBackend.

    Mirrors its observable behaviour: 1-based sequential ids per table, unique
    keys, json values returned parsed, in-place writes only for jsonb.
    `fail_on[(operation, representation)]` makes an operation raise.
    """

    name = "memory"
    description = "in-memory test backend"

    def __init__(self) -> None:
        self.rows: Dict[Representation, Dict[int, Tuple[str, Any]]] = {}
        self.next_id: Dict[Representation, int] = {}
        self.calls: List[Tuple[str, Representation]] = []
        self.fail_on: Dict[Tuple[str, Representation], Exception] = {}
        self.opened = False
        self.closed = False
        self.provisioned = False

    def _maybe_fail(self, operation: str, representation: Representation) -> None:
        self.calls.append((operation, representation))
        exc = self.fail_on.get((operation, representation))
        if exc is not None:
            raise exc

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True

    async def provision_schema(self) -> None:
        self.rows = {r: {} for r in Representation}
        self.next_id = {r: 1 for r in Representation}
        self.provisioned = True

    async def insert(self, representation: Representation, key: str, value: Any) -> None:
        identifier = self.next_id[representation]
        self.next_id[representation] += 1  # a failed insert still consumes an id, like SERIAL
        self._maybe_fail("insert", representation)
        if representation is Representation.TEXT:
            json.loads(value)
        if any(existing == key for existing, _ in self.rows[representation].values()):
            raise ValueError(f"duplicate key {key}")
        stored = value if representation is Representation.TEXT else copy.deepcopy(value)
        self.rows[representation][identifier] = (key, stored)

    async def read_document(self, representation: Representation, identifier: int) -> Optional[Any]:
        self._maybe_fail("read_document", representation)
        row = self.rows[representation].get(identifier)
        if row is None:
            return None
        _, value = row
        return json.loads(value) if representation is Representation.TEXT else copy.deepcopy(value)

    async def read_field(self, representation: Representation, identifier: int, field: str) -> Any:
        self._maybe_fail("read_field", representation)
        document = await self.read_document(representation, identifier)
        return None if document is None else document.get(field)

    async def write_field(
        self, representation: Representation, identifier: int, field: str, value: Any
    ) -> None:
        self._maybe_fail("write_field", representation)
        if not self.supports(representation, Phase.PARTIAL_WRITE):
            raise NotImplementedError(representation.value)
        row = self.rows[representation].get(identifier)
        if row is not None:
            row[1][field] = value

    async def count_rows(self, representation: Representation) -> int:
        return len(self.rows[representation])

    def supports(self, representation: Representation, phase: Phase) -> bool:
        if phase is Phase.PARTIAL_WRITE:
            return representation is Representation.INDEXED
        return True

    def keys(self, representation: Representation) -> List[str]:
        return [key for key, _ in self.rows[representation].values()]


@pytest.fixture
def memory_backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def fixture_dir(tmp_path: Path) -> Path:
    """
    Two small documents plus a file the loader must ignore.
    """
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "a.json").write_text('{"a":1}', encoding="utf-8")
    (data_dir / "b.json").write_text('{"b":{"c":2}}', encoding="utf-8")
    (data_dir / "notes.txt").write_text("not a fixture", encoding="utf-8")
    return data_dir


@pytest.fixture
def bench_settings(fixture_dir: Path, tmp_path: Path) -> Settings:
    """
    Settings for a fast, deterministic run against the fixture directory.
    """
    return Settings(
        data_dir=fixture_dir,
        data_insert_loop_count=3,
        test_iteration_count=5,
        startup_delay_seconds=0,
        random_seed=1234,
        results_dir=tmp_path / "results",
        persist_results=False,
    )


@pytest.fixture
def quiet_console() -> Console:
    return Console(file=io.StringIO(), width=120)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "postgres"),
        db_schema=os.getenv("DB_SCHEMA", "jsonbench_test"),
        log_level="DEBUG",
        startup_delay_seconds=0,
        persist_results=False,
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped autocommit connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()
