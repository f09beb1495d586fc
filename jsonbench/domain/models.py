"""
Domain models for the JSON storage benchmark.

Defines the loaded fixture payload, the two storage representations under
comparison and the four benchmark phases, in the order the pipeline runs them.
"""
from __future__ import annotations

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Representation(str, Enum):
    """How a document is stored: as JSON text or as parsed, indexed JSONB."""

    TEXT = "json"
    INDEXED = "jsonb"

    @property
    def table(self) -> str:
        return f"test_{self.value}"


class Phase(str, Enum):
    INSERT = "insert"
    FULL_READ = "full_read"
    PARTIAL_WRITE = "partial_write"
    PARTIAL_READ = "partial_read"


class Payload(BaseModel):
    """
    A fixture document loaded once at startup.

    The content is kept as the raw file text; it is only parsed when the
    indexed representation needs a document, so a malformed fixture fails at
    insertion rather than at load time.
    """

    name: str = Field(..., description="Fixture file name.")
    raw: str = Field(..., description="Full file content, unparsed.")

    model_config = {"frozen": True}

    @property
    def size_bytes(self) -> int:
        return len(self.raw.encode("utf-8"))

    def document(self) -> Any:
        return json.loads(self.raw)


__all__ = ["Representation", "Phase", "Payload"]
