"""
Phase-level resource profiling.

The per-operation latencies come from `jsonbench.utils.timer`; this module
records what the harness process itself was doing while a whole phase ran:
wall-clock duration, peak RSS (sampled on a background thread with psutil)
and CPU percent. These figures are reported next to the phase means for
context and are not part of the latency comparison.

Usage:
    from jsonbench.utils.profiler import profile_block

    with profile_block("insert") as stats:
        await run_insert_phase(ctx)

    print(stats.duration_seconds, stats.peak_rss_bytes)
"""

from __future__ import annotations

import contextlib
import threading
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Generator, Optional

import psutil


@dataclass
class ProfileStats:
    label: str
    start_ts: float = 0.0
    end_ts: float = 0.0
    duration_seconds: float = 0.0
    peak_rss_bytes: Optional[int] = None
    cpu_percent: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["duration_seconds"] = round(self.duration_seconds, 3)
        if self.cpu_percent is not None:
            data["cpu_percent"] = round(self.cpu_percent, 1)
        return data


@contextlib.contextmanager
def profile_block(
    label: str, sample_interval_ms: int = 50
) -> Generator[ProfileStats, None, None]:
    """
    Profile the enclosed block.

    The sampler thread only reads process counters, so it is safe to wrap code
    that awaits on the event loop running in the calling thread.

    Parameters
    ----------
    label : str
        Name recorded on the stats (the phase name, in practice).
    sample_interval_ms : int
        RSS sampling interval. Lower values catch shorter spikes.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    process.cpu_percent(interval=None)  # primes the counter
    peak_rss = process.memory_info().rss
    stop_sampling = threading.Event()

    def _sample_memory() -> None:
        nonlocal peak_rss
        while not stop_sampling.is_set():
            try:
                peak_rss = max(peak_rss, process.memory_info().rss)
            except psutil.Error:
                return
            stop_sampling.wait(timeout=sample_interval_ms / 1000.0)

    sampler = threading.Thread(target=_sample_memory, name=f"rss-{label}", daemon=True)
    sampler.start()

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts
        stop_sampling.set()
        sampler.join(timeout=1.0)
        stats.peak_rss_bytes = peak_rss
        stats.cpu_percent = process.cpu_percent(interval=None)


__all__ = ["ProfileStats", "profile_block"]
