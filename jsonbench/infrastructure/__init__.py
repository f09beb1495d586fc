"""
Infrastructure package for the JSON storage benchmark.

Centralizes database connectivity (DSN composition, pooled async connections).
Keep this layer focused on I/O and resource management, decoupled from the
phase and orchestrator logic.
"""

from jsonbench.infrastructure.db_factory import build_dsn, create_async_pool

__all__ = [
    "build_dsn",
    "create_async_pool",
]
