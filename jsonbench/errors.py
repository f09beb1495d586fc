"""
Exception hierarchy for the JSON storage benchmark.

Fatal setup errors (payload loading, schema provisioning) abort the run before
any phase starts. Sampling and aggregation errors are raised by the sampler and
timer helpers and handled by the orchestrator.
"""

from __future__ import annotations


class BenchmarkError(Exception):
    """Base exception for all benchmark errors."""


class PayloadLoadError(BenchmarkError):
    """The fixture directory could not be read or holds no fixtures."""


class SchemaProvisioningError(BenchmarkError):
    """Table or index creation failed; the benchmark cannot run without its schema."""


class PhasePreconditionError(BenchmarkError):
    """A phase was started without the row population it samples from."""

    def __init__(self, phase: str, message: str) -> None:
        self.phase = phase
        super().__init__(f"[{phase}] {message}")


class EmptyDocumentError(BenchmarkError):
    """A document offered for field selection has no top-level fields."""


class EmptySamplesError(BenchmarkError):
    """A mean was requested over a phase that recorded no durations."""


class UnknownBackendError(BenchmarkError, ValueError):
    """No storage backend is registered under the requested name."""


__all__ = [
    "BenchmarkError",
    "PayloadLoadError",
    "SchemaProvisioningError",
    "PhasePreconditionError",
    "EmptyDocumentError",
    "EmptySamplesError",
    "UnknownBackendError",
]
