"""
Per-operation timing and aggregation.

`timed` brackets exactly one awaited operation with `time.perf_counter()` and
reports the elapsed wall-clock time in milliseconds. `mean` is the only summary
statistic the benchmark reports.
"""

from __future__ import annotations

import time
from typing import Awaitable, Callable, Sequence, Tuple, TypeVar

from jsonbench.errors import EmptySamplesError

T = TypeVar("T")


async def timed(operation: Callable[[], Awaitable[T]]) -> Tuple[T, float]:
    """
    Await ``operation()`` and return ``(result, elapsed_ms)``.

    The awaitable is created inside the timed window so that any work done when
    the coroutine is built is attributed to the operation.
    """
    start = time.perf_counter()
    result = await operation()
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    return result, elapsed_ms


def mean(samples: Sequence[float]) -> float:
    """Arithmetic mean of ``samples``; raises EmptySamplesError when there are none."""
    if not samples:
        raise EmptySamplesError("cannot average an empty sample sequence")
    return sum(samples) / len(samples)


__all__ = ["timed", "mean"]
