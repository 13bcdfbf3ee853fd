"""Custom exceptions for the transform cache."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class CacheError(Exception):
    """Base exception for all transform cache errors."""


class KeyDerivationError(CacheError):
    """Raised when the (source, options, identifier) triple cannot be serialized.

    Examples: cyclic option structures, values that have no JSON form.
    """


class CorruptEntryError(CacheError):
    """Raised when a cache entry cannot be decoded.

    Never reaches callers of the cache itself: the store treats a corrupt
    entry exactly like a missing one.
    """


class DirectoryError(CacheError):
    """Raised when a cache directory cannot be created.

    Attributes:
        directory: The directory that could not be created.
    """

    def __init__(self, directory: Path, message: str) -> None:
        self.directory = directory
        super().__init__(message)


class CacheWriteError(CacheError):
    """Raised when a computed result cannot be persisted.

    Attributes:
        path: The entry file that could not be written.
        result: The computed result, when the failure happened after a
            successful transform. Callers may still use it.
    """

    def __init__(self, path: Path, message: str, result: Any = None) -> None:
        self.path = path
        self.result = result
        super().__init__(message)


class ConfigError(CacheError):
    """Raised when configuration loading or validation fails."""
