"""
Randomised sampling for the read and write phases.

Identifiers are drawn uniformly from the inclusive range of synthetic ids the
insert phase produced, and field names uniformly from a fetched document's
top-level keys, so that no phase keeps hitting the same rows or fields.
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from typing import Any, Optional

from jsonbench.errors import EmptyDocumentError

_default_rng = random.Random()


def random_in_range(minimum: int, maximum: int, rng: Optional[random.Random] = None) -> int:
    """Uniform integer in ``[minimum, maximum]``, both bounds inclusive."""
    if minimum > maximum:
        raise ValueError(f"empty range: minimum {minimum} > maximum {maximum}")
    return (rng or _default_rng).randint(minimum, maximum)


def random_field_name(document: Any, rng: Optional[random.Random] = None) -> str:
    """
    Pick one of ``document``'s top-level field names uniformly at random.

    Raises EmptyDocumentError when the document is not a JSON object or has no
    fields, since there is nothing to select.
    """
    if not isinstance(document, Mapping):
        raise EmptyDocumentError(
            f"expected a JSON object, got {type(document).__name__}; no fields to select"
        )
    if not document:
        raise EmptyDocumentError("document has no top-level fields")
    return (rng or _default_rng).choice(list(document.keys()))


__all__ = ["random_in_range", "random_field_name"]
