"""
Storage backend interface for the JSON storage benchmark.

A backend provisions the schema under test and performs the individual
operations the phases time. The orchestrator only talks to this interface, so
another document store can be benchmarked by implementing it and registering
a factory in `jsonbench.backends`.
"""

from __future__ import annotations

import abc
from typing import Any, Optional, Protocol, runtime_checkable

from jsonbench.domain.models import Phase, Representation


@runtime_checkable
class StorageBackend(Protocol):
    """
    Capabilities every storage backend must provide.

    Attributes
    ----------
    name : str
        Short machine-friendly identifier used by the backend registry.
    description : str
        Human-friendly summary of the storage under test.
    """

    name: str
    description: str

    async def open(self) -> None:
        """Acquire connections; called once before provisioning."""
        ...

    async def close(self) -> None:
        """Release connections; safe to call more than once."""
        ...

    async def provision_schema(self) -> None:
        """Reset the benchmark namespace and create one table per representation."""
        ...

    async def insert(self, representation: Representation, key: str, value: Any) -> None:
        """Insert one row. ``value`` is raw text for TEXT, a parsed document for INDEXED."""
        ...

    async def read_document(self, representation: Representation, identifier: int) -> Optional[Any]:
        """Fetch the full stored value by synthetic id; None when no such row exists."""
        ...

    async def read_field(self, representation: Representation, identifier: int, field: str) -> Any:
        """Extract one top-level field of the stored value."""
        ...

    async def write_field(
        self, representation: Representation, identifier: int, field: str, value: Any
    ) -> None:
        """Set one top-level field of the stored value in place."""
        ...

    async def count_rows(self, representation: Representation) -> int:
        ...

    def supports(self, representation: Representation, phase: Phase) -> bool:
        """Whether ``phase`` can be measured for ``representation`` on this backend."""
        ...


class AbstractStorageBackend(abc.ABC):
    """
    ABC helper for class-based backends.

    Subclasses set `name` and `description` and implement the operations. By
    default every representation supports every phase.
    """

    name: str
    description: str

    async def open(self) -> None:
        return None

    async def close(self) -> None:
        return None

    @abc.abstractmethod
    async def provision_schema(self) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def insert(self, representation: Representation, key: str, value: Any) -> None:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def read_document(self, representation: Representation, identifier: int) -> Optional[Any]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def read_field(self, representation: Representation, identifier: int, field: str) -> Any:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def write_field(
        self, representation: Representation, identifier: int, field: str, value: Any
    ) -> None:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def count_rows(self, representation: Representation) -> int:  # pragma: no cover
        raise NotImplementedError

    def supports(self, representation: Representation, phase: Phase) -> bool:
        return True


__all__ = ["StorageBackend", "AbstractStorageBackend"]
