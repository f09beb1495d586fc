"""
Fixture payload loading.

Reads every `*.json` file of the fixture directory into memory once, as opaque
text. Documents are not parsed or validated here.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from jsonbench.domain.models import Payload
from jsonbench.errors import PayloadLoadError
from jsonbench.utils.logging import get_logger

log = get_logger(__name__)

FIXTURE_SUFFIX = ".json"


def _is_fixture(path: Path) -> bool:
    return path.suffix.lower() == FIXTURE_SUFFIX and path.is_file()


def load_payloads(data_dir: Path | str) -> List[Payload]:
    """
    Load fixture files from ``data_dir`` in name order.

    Raises
    ------
    PayloadLoadError
        If the directory cannot be listed, a fixture cannot be read as UTF-8
        text, or there are no fixtures.
    """
    directory = Path(data_dir)
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        raise PayloadLoadError(f"cannot read fixture directory {directory}: {exc}") from exc

    payloads: List[Payload] = []
    for path in entries:
        if not _is_fixture(path):
            continue
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PayloadLoadError(f"cannot read fixture {path.name}: {exc}") from exc
        payloads.append(Payload(name=path.name, raw=raw))

    if not payloads:
        raise PayloadLoadError(f"no *{FIXTURE_SUFFIX} fixtures found in {directory}")

    total_bytes = sum(p.size_bytes for p in payloads)
    log.info(
        f"Loaded {len(payloads)} file(s) with {total_bytes / 1_000_000:.2f} megabytes of data",
        extra={"payloads": len(payloads), "bytes": total_bytes, "data_dir": str(directory)},
    )
    return payloads


__all__ = ["FIXTURE_SUFFIX", "load_payloads"]
