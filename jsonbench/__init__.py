"""
JSON Storage Benchmark - latency comparison of PostgreSQL json and jsonb columns.

Documents loaded from a fixture directory are stored twice, once as JSON text
and once as parsed JSONB, and four access patterns are timed per operation:

- Bulk insertion
- Full-document read
- Partial-field write (jsonb only)
- Partial-field read

Reads and writes target randomly sampled rows and fields, and each phase
reports the arithmetic mean latency per representation.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from jsonbench.backends import (
    AbstractStorageBackend,
    PostgresBackend,
    StorageBackend,
    available_backends,
    resolve_backend,
)
from jsonbench.config import Settings, get_settings
from jsonbench.domain import Payload, Phase, PhaseResult, Representation, RunResults
from jsonbench.loader import load_payloads
from jsonbench.orchestrator import BenchmarkContext, run_benchmark, run_phases
from jsonbench.sampler import random_field_name, random_in_range
from jsonbench.utils.logging import configure_logging, get_logger
from jsonbench.utils.timer import mean, timed

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Payload",
    "Phase",
    "PhaseResult",
    "Representation",
    "RunResults",
    # Backends
    "AbstractStorageBackend",
    "PostgresBackend",
    "StorageBackend",
    "available_backends",
    "resolve_backend",
    # Orchestration
    "BenchmarkContext",
    "load_payloads",
    "run_benchmark",
    "run_phases",
    # Sampling and timing
    "random_field_name",
    "random_in_range",
    "mean",
    "timed",
    # Logging
    "configure_logging",
    "get_logger",
]
