"""
Storage backends for the JSON storage benchmark.

Re-exports the backend interfaces and the registry used by the orchestrator
and CLI to resolve a backend by name.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from jsonbench.backends.abstract import AbstractStorageBackend, StorageBackend
from jsonbench.backends.postgres import PostgresBackend
from jsonbench.config import Settings
from jsonbench.errors import UnknownBackendError


def _backend_factories() -> Dict[str, Callable[[Optional[Settings]], StorageBackend]]:
    """Registry of available backends."""
    return {
        "postgres": lambda settings: PostgresBackend(settings=settings),
    }


def available_backends() -> List[str]:
    return sorted(_backend_factories().keys())


def resolve_backend(name: str, settings: Optional[Settings] = None) -> StorageBackend:
    factories = _backend_factories()
    if name not in factories:
        raise UnknownBackendError(f"Unknown backend '{name}'. Available: {', '.join(factories)}")
    return factories[name](settings)


__all__ = [
    "AbstractStorageBackend",
    "StorageBackend",
    "PostgresBackend",
    "available_backends",
    "resolve_backend",
]
