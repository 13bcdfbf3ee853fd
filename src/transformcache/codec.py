"""JSON entry encoding with optional gzip compression."""

from __future__ import annotations

import gzip
import json
import zlib
from typing import Any

from transformcache.exceptions import CorruptEntryError


def encode(result: Any, compress: bool) -> bytes:
    """Serialize *result* to JSON bytes, gzip-compressed when *compress* is set.

    Raises:
        TypeError: If *result* has no JSON form.
        ValueError: If *result* contains a cycle.
    """
    data = json.dumps(result, ensure_ascii=False).encode("utf-8")
    return gzip.compress(data) if compress else data


def decode(data: bytes, compress: bool) -> Any:
    """Inverse of :func:`encode`.

    Raises:
        CorruptEntryError: If the payload is not valid (compressed) JSON.
    """
    try:
        content = gzip.decompress(data) if compress else data
        return json.loads(content.decode("utf-8"))
    except (OSError, EOFError, zlib.error, UnicodeDecodeError, ValueError) as exc:
        raise CorruptEntryError(f"Cannot decode cache entry: {exc}") from exc
