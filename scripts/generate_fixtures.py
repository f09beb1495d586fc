"""
Fixture generation script for the JSON storage benchmark.

Writes deterministic pseudo-random JSON documents into a fixture directory.
Each document is an object with a configurable number of top-level fields whose
values mix scalars, arrays and nested objects, so partial reads and writes hit
fields of varied size.
"""

from __future__ import annotations

import json
import random
import sys
import time
from pathlib import Path
from typing import Any, Dict

import typer

app = typer.Typer(help="Generate synthetic JSON fixtures for the benchmark.")

_WORDS = ["alpha", "beta", "gamma", "delta", "epsilon", "zeta", "eta", "theta"]


def _value(rng: random.Random, depth: int) -> Any:
    kind = rng.choice(["int", "float", "str", "bool", "list", "object"] if depth > 0 else ["int", "str"])
    if kind == "int":
        return rng.randint(0, 1_000_000)
    if kind == "float":
        return round(rng.uniform(0, 10_000), 2)
    if kind == "str":
        return " ".join(rng.choice(_WORDS) for _ in range(rng.randint(1, 6)))
    if kind == "bool":
        return rng.choice([True, False])
    if kind == "list":
        return [_value(rng, depth - 1) for _ in range(rng.randint(0, 5))]
    return {f"k{i}": _value(rng, depth - 1) for i in range(rng.randint(1, 4))}


def _generate_document(rng: random.Random, fields: int, depth: int) -> Dict[str, Any]:
    return {f"field_{i:03d}": _value(rng, depth) for i in range(fields)}


def _write_fixtures(output_dir: Path, count: int, fields: int, depth: int, seed: int) -> list[Path]:
    rng = random.Random(seed)
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for index in range(count):
        path = output_dir / f"fixture_{index:04d}.json"
        path.write_text(json.dumps(_generate_document(rng, fields, depth)), encoding="utf-8")
        written.append(path)
    return written


@app.command()
def main(
    output: Path = typer.Option(Path("data"), "--output", "-o", help="Fixture directory."),
    count: int = typer.Option(10, "--count", "-c", min=1, help="Number of documents."),
    fields: int = typer.Option(
        20, "--fields", "-f", min=1, help="Top-level fields per document."
    ),
    depth: int = typer.Option(2, "--depth", min=0, help="Maximum nesting depth of values."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
) -> None:
    """
    Generate JSON fixture documents.
    """
    start = time.perf_counter()
    written = _write_fixtures(output, count=count, fields=fields, depth=depth, seed=seed)
    total_bytes = sum(p.stat().st_size for p in written)
    typer.echo(
        f"Wrote {len(written)} fixture(s), {total_bytes / 1_000_000:.2f} MB, to {output} "
        f"in {time.perf_counter() - start:.2f}s (seed={seed})"
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
