from __future__ import annotations

import math
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from jsonbench.domain.models import Phase
from jsonbench.domain.results import PhaseResult, RunResults

_PHASE_TITLES = {
    Phase.INSERT: "Insert Full Blob",
    Phase.FULL_READ: "Read Full Blob",
    Phase.PARTIAL_WRITE: "Partial Blob Write",
    Phase.PARTIAL_READ: "Partial Blob Read",
}


def _format_mean(result: PhaseResult) -> str:
    if result.mean_ms is None:
        return "-"
    if math.isnan(result.mean_ms):
        return "[yellow]NaN[/yellow]"
    return f"{result.mean_ms:,.3f}"


def _add_result_columns(table: Table) -> None:
    table.add_column("Representation", style="cyan", no_wrap=True)
    table.add_column("Samples", justify="right", style="magenta")
    table.add_column("Mean (ms)", justify="right", style="bold green")
    table.add_column("Failures", justify="right", style="red")
    table.add_column("Skipped", justify="right", style="yellow")


def _result_cells(result: PhaseResult) -> list[str]:
    return [
        result.representation.value,
        f"{len(result.samples_ms):,}",
        _format_mean(result),
        str(len(result.failures)),
        str(result.skipped),
    ]


def print_phase_summary(
    phase: Phase, results: RunResults, console: Optional[Console] = None
) -> None:
    """Render the per-representation means of one finished phase."""
    console = console or Console()
    table = Table(title=f"{_PHASE_TITLES[phase]} Results", box=box.SIMPLE)
    _add_result_columns(table)
    for result in results.for_phase(phase):
        table.add_row(*_result_cells(result))
    console.print(table)


def print_results(results: RunResults, console: Optional[Console] = None) -> None:
    """
    Render every phase of a run as one table.

    Phases appear in pipeline order; the wall-clock and peak memory columns come
    from the phase profiler and describe the harness process, not the database.
    """
    console = console or Console()

    if not results.phases:
        console.print("[yellow]No results to display.[/yellow]")
        return

    meta = results.metadata
    title = "JSON Storage Benchmark Results"
    if meta:
        title = (
            f"{title}\n[dim]{meta.get('payloads', '?')} payload(s) × {meta.get('passes', '?')} pass(es), "
            f"{meta.get('iterations', '?')} iteration(s) per read/write phase[/dim]"
        )

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Phase", style="blue", no_wrap=True)
    _add_result_columns(table)
    table.add_column("Phase Wall (s)", justify="right", style="green")
    table.add_column("Peak Memory (MB)", justify="right", style="yellow")

    for phase in Phase:
        stats = results.profiles.get(phase)
        wall = f"{stats.duration_seconds:.2f}" if stats else "N/A"
        mem = (
            f"{stats.peak_rss_bytes / (1024 * 1024):.2f}"
            if stats and stats.peak_rss_bytes
            else "N/A"
        )
        for result in results.for_phase(phase):
            table.add_row(phase.value, *_result_cells(result), wall, mem)

    console.print(table)


__all__ = ["print_phase_summary", "print_results"]
