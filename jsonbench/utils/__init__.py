"""
Utilities package for the JSON storage benchmark.

Exports shared helpers for logging, timing and profiling. Keep this package
free of database and phase logic.
"""

from jsonbench.utils.logging import configure_logging, get_logger
from jsonbench.utils.profiler import ProfileStats, profile_block
from jsonbench.utils.timer import mean, timed

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
    "mean",
    "timed",
]
