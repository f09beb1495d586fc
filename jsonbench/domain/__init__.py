"""
Domain package for the JSON storage benchmark.

Exports the payload, representation and phase definitions and the per-run
results structure. Keep this package free of database I/O.
"""

from jsonbench.domain.models import Payload, Phase, Representation
from jsonbench.domain.results import PhaseResult, RunResults

__all__ = [
    "Payload",
    "Phase",
    "Representation",
    "PhaseResult",
    "RunResults",
]
