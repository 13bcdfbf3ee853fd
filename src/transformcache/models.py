"""Data models for the transform cache."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field


class Transform(Protocol):
    """The expensive, deterministic computation whose result is cached.

    Must return a JSON-serializable value for the same inputs every time.
    """

    def __call__(self, source: str, options: Any) -> Any: ...


class CacheRequest(BaseModel):
    """One cache lookup: the inputs of a transform plus cache settings."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., description="Source text handed to the transform")
    # Typed as Any so the structure is held as given, never re-validated.
    options: Any = Field(
        default_factory=dict,
        description="Transform configuration; path-bearing plugins/presets are normalized for keying",
    )
    identifier: str = Field(
        default="",
        description="Salt that busts the cache independently of source and options",
    )
    cache_directory: Optional[Path] = Field(
        default=None,
        description="Explicit entry directory; disables the temp-dir fallback",
    )
    compression: bool = Field(
        default=True,
        description="Store entries gzip-compressed (.json.gz)",
    )
