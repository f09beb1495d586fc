"""
Results structure for a benchmark run.

One `PhaseResult` per (representation, phase) pair the backend supports. Each
holds the ordered per-operation durations, plus the failure markers and
skipped iterations that kept a sample from being recorded. The structure is
rebuilt for every run and never read back from disk.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from jsonbench.domain.models import Phase, Representation
from jsonbench.errors import EmptySamplesError
from jsonbench.utils.logging import get_logger
from jsonbench.utils.profiler import ProfileStats
from jsonbench.utils.timer import mean

log = get_logger(__name__)


@dataclass
class PhaseResult:
    representation: Representation
    phase: Phase
    samples_ms: List[float] = field(default_factory=list)
    failures: List[Dict[str, Any]] = field(default_factory=list)
    skipped: int = 0
    mean_ms: Optional[float] = None

    def record(self, elapsed_ms: float) -> None:
        self.samples_ms.append(elapsed_ms)

    def record_failure(self, iteration: int, exc: BaseException) -> None:
        self.failures.append(
            {"iteration": iteration, "error": str(exc), "error_type": type(exc).__name__}
        )

    def finalize(self) -> float:
        """Compute the mean; a phase with no samples reports NaN and logs why."""
        try:
            self.mean_ms = mean(self.samples_ms)
        except EmptySamplesError:
            log.warning(
                f"[NO SAMPLES] {self.phase.value}/{self.representation.value}",
                extra={
                    "phase": self.phase.value,
                    "representation": self.representation.value,
                    "failures": len(self.failures),
                    "skipped": self.skipped,
                },
            )
            self.mean_ms = math.nan
        return self.mean_ms

    def to_dict(self) -> Dict[str, Any]:
        mean_ms = self.mean_ms
        return {
            "samples": len(self.samples_ms),
            # NaN is not valid JSON
            "mean_ms": None if mean_ms is None or math.isnan(mean_ms) else round(mean_ms, 3),
            "samples_ms": [round(s, 3) for s in self.samples_ms],
            "failures": list(self.failures),
            "skipped": self.skipped,
        }


@dataclass
class RunResults:
    phases: Dict[Representation, Dict[Phase, PhaseResult]] = field(default_factory=dict)
    profiles: Dict[Phase, ProfileStats] = field(default_factory=dict)
    started_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def fresh(cls, slots: Iterable[Tuple[Representation, Phase]], **metadata: Any) -> "RunResults":
        results = cls(metadata=dict(metadata))
        for representation, phase in slots:
            results.phases.setdefault(representation, {})[phase] = PhaseResult(
                representation=representation, phase=phase
            )
        return results

    def get(self, representation: Representation, phase: Phase) -> PhaseResult:
        return self.phases[representation][phase]

    def has(self, representation: Representation, phase: Phase) -> bool:
        return phase in self.phases.get(representation, {})

    def for_phase(self, phase: Phase) -> Iterator[PhaseResult]:
        for by_phase in self.phases.values():
            if phase in by_phase:
                yield by_phase[phase]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at,
            **self.metadata,
            "results": {
                representation.value: {
                    phase.value: result.to_dict() for phase, result in by_phase.items()
                }
                for representation, by_phase in self.phases.items()
            },
            "profiles": {phase.value: stats.to_dict() for phase, stats in self.profiles.items()},
        }


__all__ = ["PhaseResult", "RunResults"]
