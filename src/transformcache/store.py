"""Raw entry file access.

Entries live at ``<directory>/<key>.json`` or ``<directory>/<key>.json.gz``.
A missing entry and a corrupt one look the same to callers: both are
:data:`MISS`.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from transformcache.codec import decode
from transformcache.exceptions import CacheWriteError, CorruptEntryError

logger = logging.getLogger(__name__)


class _Miss:
    """Sentinel for an absent or unusable entry (``None`` is a valid result)."""

    _instance: _Miss | None = None

    def __new__(cls) -> _Miss:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISS"


MISS = _Miss()


def entry_path(directory: Path, key: str, compress: bool) -> Path:
    """Return the entry file for *key* inside *directory*."""
    return Path(directory) / (f"{key}.json.gz" if compress else f"{key}.json")


def try_read(path: Path, compress: bool) -> Any:
    """Read and decode the entry at *path*.

    Returns:
        The cached result, or :data:`MISS` when the file is absent,
        unreadable or corrupt.
    """
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        logger.debug("Cache miss: %s", path)
        return MISS
    except OSError as exc:
        logger.debug("Cache entry %s unreadable: %s", path, exc)
        return MISS

    try:
        result = decode(data, compress)
    except CorruptEntryError as exc:
        logger.warning("Ignoring corrupt cache entry %s: %s", path, exc)
        return MISS

    logger.debug("Cache hit: %s", path)
    return result


def write_entry(path: Path, data: bytes) -> None:
    """Write *data* to *path*, replacing any existing entry.

    The bytes go to a temporary sibling first and are moved into place with
    :func:`os.replace`, so a concurrent reader sees either the old entry or
    the new one.

    Raises:
        CacheWriteError: If the file cannot be written.
    """
    try:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as exc:
        raise CacheWriteError(path, f"Failed to write cache entry {path}: {exc}") from exc

    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp_name, path)
    except OSError as exc:
        # Clean up temp file on failure
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise CacheWriteError(path, f"Failed to write cache entry {path}: {exc}") from exc
