from __future__ import annotations

import asyncio
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from jsonbench.backends import available_backends
from jsonbench.config import get_settings
from jsonbench.orchestrator import run_benchmark
from jsonbench.utils.logging import configure_logging

app = typer.Typer(help="JSON vs JSONB storage latency benchmark CLI.")


class FailurePolicy(str, Enum):
    strict = "strict"
    tolerant = "tolerant"


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} "
        f"schema={settings.db_schema} | data_dir={settings.data_dir} "
        f"passes={settings.data_insert_loop_count} iterations={settings.test_iteration_count} "
        f"backend={settings.benchmark_backend} failure_policy={settings.failure_policy}"
    )


@app.command()
def backends() -> None:
    """
    List the registered storage backends.
    """
    typer.echo("Available backends: " + ", ".join(available_backends()))


@app.command()
def run(
    passes: Optional[int] = typer.Option(
        None, "--passes", "-n", min=1, help="Insertion passes over the fixture set."
    ),
    iterations: Optional[int] = typer.Option(
        None, "--iterations", "-i", min=1, help="Timed iterations per read/write phase."
    ),
    data_dir: Optional[Path] = typer.Option(
        None, "--data-dir", "-d", help="Directory holding the *.json fixtures."
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for id and field sampling."),
    no_wait: bool = typer.Option(
        False, "--no-wait", help="Skip the startup delay before connecting."
    ),
    failure_policy: Optional[FailurePolicy] = typer.Option(
        None,
        "--failure-policy",
        help="strict: abort on the first failed operation; tolerant: record it and continue.",
    ),
    no_persist: bool = typer.Option(False, "--no-persist", help="Do not write results/*.json."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON log lines."),
) -> None:
    """
    Provision the schema and run the insert, full-read, partial-write and partial-read phases.
    """
    settings = get_settings()
    overrides: Dict[str, Any] = {}
    if passes is not None:
        overrides["data_insert_loop_count"] = passes
    if iterations is not None:
        overrides["test_iteration_count"] = iterations
    if data_dir is not None:
        overrides["data_dir"] = data_dir
    if seed is not None:
        overrides["random_seed"] = seed
    if no_wait:
        overrides["startup_delay_seconds"] = 0.0
    if failure_policy is not None:
        overrides["failure_policy"] = failure_policy.value
    if no_persist:
        overrides["persist_results"] = False
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(level=settings.log_level, json_logs=json_logs or settings.json_logs)
    typer.echo(
        f"Running backend='{settings.benchmark_backend}' with passes={settings.data_insert_loop_count} "
        f"iterations={settings.test_iteration_count} data_dir={settings.data_dir}"
    )
    asyncio.run(run_benchmark(settings=settings))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
