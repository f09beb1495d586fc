"""
Orchestrator for the four benchmark phases.

Usage (example from CLI):
    import asyncio
    from jsonbench.orchestrator import run_benchmark

    results = asyncio.run(run_benchmark())
    print(results.to_dict())

A run loads the fixtures, waits for the database, provisions the schema and
then executes the pipeline in fixed order: insert, full read, partial write,
partial read. Every operation is awaited before the next one is issued; the
recorded timings must reflect single-operation latency, not queueing.

Outputs are saved to `results/` by default:
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import asyncio
import json
import random
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Iterable, List, Optional, Sequence, Tuple

from rich.console import Console

from jsonbench.backends import StorageBackend, resolve_backend
from jsonbench.config import Settings, get_settings
from jsonbench.domain.models import Payload, Phase, Representation
from jsonbench.domain.results import PhaseResult, RunResults
from jsonbench.errors import EmptyDocumentError, PhasePreconditionError
from jsonbench.loader import load_payloads
from jsonbench.reporter import print_phase_summary, print_results
from jsonbench.sampler import random_field_name, random_in_range
from jsonbench.utils.logging import get_logger
from jsonbench.utils.profiler import profile_block
from jsonbench.utils.timer import timed

log = get_logger(__name__)


@dataclass
class BenchmarkContext:
    """
    Everything a phase needs, built once per run and passed to each phase.

    `max_identifier` is the highest synthetic id the insert phase produced
    (ids start at 1). The sampling phases draw from ``[1, max_identifier]``;
    tests can seed it directly to run a phase without inserting first.
    """

    settings: Settings
    payloads: Sequence[Payload]
    backend: StorageBackend
    results: RunResults
    rng: random.Random
    max_identifier: int = 0

    @classmethod
    def create(
        cls,
        settings: Settings,
        payloads: Sequence[Payload],
        backend: StorageBackend,
    ) -> "BenchmarkContext":
        slots = [
            (representation, phase)
            for representation in Representation
            for phase in Phase
            if backend.supports(representation, phase)
        ]
        results = RunResults.fresh(
            slots,
            backend=backend.name,
            payloads=len(payloads),
            passes=settings.data_insert_loop_count,
            iterations=settings.test_iteration_count,
            failure_policy=settings.failure_policy,
            random_seed=settings.random_seed,
        )
        return cls(
            settings=settings,
            payloads=payloads,
            backend=backend,
            results=results,
            rng=random.Random(settings.random_seed),
        )

    def representations(self, phase: Phase) -> List[Representation]:
        return [r for r in Representation if self.results.has(r, phase)]


@asynccontextmanager
async def _iteration_guard(
    ctx: BenchmarkContext, result: PhaseResult, iteration: int
) -> AsyncIterator[None]:
    """
    Apply the failure policy to one iteration.

    strict: the error propagates and aborts the run.
    tolerant: the error is recorded as a failure marker and the loop continues.
    """
    try:
        yield
    except Exception as exc:  # noqa: BLE001 - tolerant mode records any operation failure
        if ctx.settings.failure_policy == "strict":
            raise
        log.warning(
            f"[OPERATION FAILED] {result.phase.value}/{result.representation.value}",
            extra={
                "phase": result.phase.value,
                "representation": result.representation.value,
                "iteration": iteration,
                "error": str(exc),
            },
        )
        result.record_failure(iteration, exc)


async def _sample_field(
    ctx: BenchmarkContext, result: PhaseResult
) -> Optional[Tuple[int, str]]:
    """
    Draw a random row and one of its top-level field names (untimed).

    Rows that are missing or whose value has no fields are redrawn up to
    `max_sampling_attempts` times; after that the iteration is skipped.
    """
    attempts = ctx.settings.max_sampling_attempts
    for attempt in range(1, attempts + 1):
        identifier = random_in_range(1, ctx.max_identifier, ctx.rng)
        document = await ctx.backend.read_document(result.representation, identifier)
        if document is None:
            log.debug("Sampled id has no row", extra={"id": identifier, "attempt": attempt})
            continue
        try:
            return identifier, random_field_name(document, ctx.rng)
        except EmptyDocumentError as exc:
            log.debug(str(exc), extra={"id": identifier, "attempt": attempt})

    log.warning(
        f"[SAMPLING SKIPPED] {result.phase.value}/{result.representation.value}",
        extra={"attempts": attempts, "representation": result.representation.value},
    )
    result.skipped += 1
    return None


async def _verify_row_counts(ctx: BenchmarkContext, expected: int) -> None:
    counts = {}
    for representation in ctx.representations(Phase.INSERT):
        count = await ctx.backend.count_rows(representation)
        counts[representation.value] = count
        if count != expected:
            log.warning(
                f"[ROW COUNT MISMATCH] {representation.table}: {count} != {expected}",
                extra={"table": representation.table, "rows": count, "expected": expected},
            )
    ctx.results.metadata["row_counts"] = counts


async def run_insert_phase(ctx: BenchmarkContext) -> None:
    passes = ctx.settings.data_insert_loop_count
    expected = passes * len(ctx.payloads)
    representations = ctx.representations(Phase.INSERT)
    log.info(
        f"Inserting {expected} test items into {len(representations)} test tables",
        extra={"passes": passes, "payloads": len(ctx.payloads)},
    )

    iteration = 0
    for pass_index in range(passes):
        log.info(f"Data insert loop {pass_index + 1} of {passes} executing...")
        for payload in ctx.payloads:
            key = str(uuid.uuid4())
            for representation in representations:
                result = ctx.results.get(representation, Phase.INSERT)
                async with _iteration_guard(ctx, result, iteration):
                    value = payload.raw if representation is Representation.TEXT else payload.document()
                    _, elapsed_ms = await timed(
                        lambda: ctx.backend.insert(representation, key, value)
                    )
                    result.record(elapsed_ms)
            iteration += 1

    ctx.max_identifier = expected
    await _verify_row_counts(ctx, expected)


async def run_full_read_phase(ctx: BenchmarkContext) -> None:
    iterations = ctx.settings.test_iteration_count
    for iteration in range(iterations):
        log.debug(f"Executing test iteration {iteration + 1} of {iterations}")
        for representation in ctx.representations(Phase.FULL_READ):
            result = ctx.results.get(representation, Phase.FULL_READ)
            async with _iteration_guard(ctx, result, iteration):
                identifier = random_in_range(1, ctx.max_identifier, ctx.rng)
                document, elapsed_ms = await timed(
                    lambda: ctx.backend.read_document(representation, identifier)
                )
                if document is None:
                    # a lookup that found nothing is not a document read
                    log.warning(
                        f"[READ MISSED] {Phase.FULL_READ.value}/{representation.value}",
                        extra={"id": identifier, "representation": representation.value},
                    )
                    result.skipped += 1
                    continue
                result.record(elapsed_ms)


async def run_partial_write_phase(ctx: BenchmarkContext) -> None:
    iterations = ctx.settings.test_iteration_count
    sentinel = ctx.settings.partial_write_sentinel
    for iteration in range(iterations):
        log.debug(f"Executing test iteration {iteration + 1} of {iterations}")
        for representation in ctx.representations(Phase.PARTIAL_WRITE):
            result = ctx.results.get(representation, Phase.PARTIAL_WRITE)
            async with _iteration_guard(ctx, result, iteration):
                target = await _sample_field(ctx, result)
                if target is None:
                    continue
                identifier, field = target
                _, elapsed_ms = await timed(
                    lambda: ctx.backend.write_field(representation, identifier, field, sentinel)
                )
                result.record(elapsed_ms)


async def run_partial_read_phase(ctx: BenchmarkContext) -> None:
    iterations = ctx.settings.test_iteration_count
    for iteration in range(iterations):
        log.debug(f"Executing test iteration {iteration + 1} of {iterations}")
        for representation in ctx.representations(Phase.PARTIAL_READ):
            result = ctx.results.get(representation, Phase.PARTIAL_READ)
            async with _iteration_guard(ctx, result, iteration):
                target = await _sample_field(ctx, result)
                if target is None:
                    continue
                identifier, field = target
                _, elapsed_ms = await timed(
                    lambda: ctx.backend.read_field(representation, identifier, field)
                )
                result.record(elapsed_ms)


@dataclass(frozen=True)
class PhaseSpec:
    phase: Phase
    run: Callable[[BenchmarkContext], Awaitable[None]]
    requires_rows: bool


PIPELINE: Tuple[PhaseSpec, ...] = (
    PhaseSpec(Phase.INSERT, run_insert_phase, requires_rows=False),
    PhaseSpec(Phase.FULL_READ, run_full_read_phase, requires_rows=True),
    PhaseSpec(Phase.PARTIAL_WRITE, run_partial_write_phase, requires_rows=True),
    PhaseSpec(Phase.PARTIAL_READ, run_partial_read_phase, requires_rows=True),
)


async def run_phases(
    ctx: BenchmarkContext,
    phases: Optional[Iterable[Phase]] = None,
    console: Optional[Console] = None,
) -> RunResults:
    """
    Run the selected phases (all by default) in pipeline order.

    Raises
    ------
    PhasePreconditionError
        If a sampling phase starts while ``ctx.max_identifier`` is below 1.
    """
    selected = set(phases) if phases is not None else set(Phase)

    for spec in PIPELINE:
        if spec.phase not in selected:
            continue
        name = spec.phase.value
        if spec.requires_rows and ctx.max_identifier < 1:
            raise PhasePreconditionError(
                name, "no rows to sample; run the insert phase or seed max_identifier first"
            )

        log.info(f"[PHASE START] {name}", extra={"phase": name})
        with profile_block(name) as stats:
            await spec.run(ctx)
        ctx.results.profiles[spec.phase] = stats

        for result in ctx.results.for_phase(spec.phase):
            mean_ms = result.finalize()
            log.info(
                f"{name.upper()} {result.representation.value.upper()} AVERAGE: {mean_ms:.3f}ms",
                extra={
                    "phase": name,
                    "representation": result.representation.value,
                    "samples": len(result.samples_ms),
                    "mean_ms": mean_ms,
                },
            )
        log.info(f"[PHASE COMPLETE] {name}", extra={"phase": name})
        print_phase_summary(spec.phase, ctx.results, console=console)

    return ctx.results


def _persist_results(payload: dict, results_dir: Path) -> None:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"run-{timestamp}.json"

    for path in (latest_path, archive_path):
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, sort_keys=True)

    log.info("Results persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})


async def run_benchmark(
    settings: Optional[Settings] = None,
    backend: Optional[StorageBackend] = None,
    console: Optional[Console] = None,
) -> RunResults:
    """
    Execute a complete benchmark run.

    Parameters
    ----------
    settings : Settings | None
        Run parameters. Defaults to the cached environment settings.
    backend : StorageBackend | None
        Storage under test. Defaults to the backend named by
        ``settings.benchmark_backend``. The run opens and closes it.
    console : rich.console.Console | None
        Where phase summaries and the final table are printed.

    Returns
    -------
    RunResults
        Per-representation, per-phase samples and means.
    """
    settings = settings or get_settings()
    payloads = load_payloads(settings.data_dir)

    if settings.startup_delay_seconds > 0:
        log.info(
            "Waiting for other services to come online...",
            extra={"delay_seconds": settings.startup_delay_seconds},
        )
        await asyncio.sleep(settings.startup_delay_seconds)

    backend = backend or resolve_backend(settings.benchmark_backend, settings)
    try:
        await backend.open()
        await backend.provision_schema()
        ctx = BenchmarkContext.create(settings, payloads, backend)
        await run_phases(ctx, console=console)
    finally:
        await backend.close()

    print_results(ctx.results, console=console)
    if settings.persist_results:
        _persist_results(ctx.results.to_dict(), Path(settings.results_dir))

    log.info(
        f"[BENCHMARK COMPLETE] {backend.name}",
        extra={"backend": backend.name, "phases": [p.value for p in Phase]},
    )
    return ctx.results


__all__ = [
    "BenchmarkContext",
    "PIPELINE",
    "PhaseSpec",
    "run_benchmark",
    "run_phases",
    "run_insert_phase",
    "run_full_read_phase",
    "run_partial_write_phase",
    "run_partial_read_phase",
]
