"""
Database connection factory for the JSON storage benchmark.

The harness owns one asynchronous psycopg connection pool for the whole run.
Connections are opened in autocommit mode: every benchmark operation is a
single statement and no explicit transactions are used.

Opening the pool retries transient connection failures using tenacity; the
benchmark operations themselves are never retried.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg_pool import AsyncConnectionPool, PoolTimeout
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from jsonbench.config import Settings, get_settings
from jsonbench.utils.logging import get_logger

log = get_logger(__name__)

POOL_OPEN_TIMEOUT_SECONDS = 30.0


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, PoolTimeout)),
    reraise=True,
)
async def create_async_pool(
    conninfo: Optional[str] = None,
    min_size: int = 1,
    max_size: int = 4,
    timeout: float = POOL_OPEN_TIMEOUT_SECONDS,
) -> AsyncConnectionPool:
    """
    Open an autocommit AsyncConnectionPool, waiting until min_size connections exist.

    Retries up to 5 times with exponential backoff when the server is not
    reachable yet. A pool that failed to fill is closed before the next attempt.

    Raises
    ------
    PoolTimeout
        If the pool still cannot be filled after all retry attempts.
    """
    dsn = conninfo or build_dsn()
    pool = AsyncConnectionPool(
        conninfo=dsn,
        min_size=min_size,
        max_size=max_size,
        kwargs={"autocommit": True},
        open=False,
    )
    try:
        await pool.open(wait=True, timeout=timeout)
    except BaseException:
        await pool.close()
        raise
    log.info("Connection pool open", extra={"min_size": min_size, "max_size": max_size})
    return pool


__all__ = ["build_dsn", "create_async_pool"]
