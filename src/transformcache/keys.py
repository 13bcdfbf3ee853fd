"""Cache key derivation.

A key is the MD5 hex digest of the canonical JSON form of
``{source, options, identifier}``. Before hashing, absolute paths inside
``plugins`` and ``presets`` entries are cut down to the part after the
dependency directory, so the same dependency installed in two different
checkouts produces the same key.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from transformcache.exceptions import KeyDerivationError

DEPENDENCY_MARKER = "/node_modules/"

_PATH_LISTS = ("plugins", "presets")
_PATH_FIELDS = ("request", "resolved")


def _strip_prefix(path: str, marker: str) -> str:
    return path.split(marker)[-1]


def _normalize_item(item: Any, marker: str) -> Any:
    if isinstance(item, list):
        return [_normalize_item(sub, marker) for sub in item]
    if not isinstance(item, dict):
        return item

    file_info = item.get("file")
    if isinstance(file_info, dict):
        for field in _PATH_FIELDS:
            value = file_info.get(field)
            if isinstance(value, str) and value:
                file_info[field] = _strip_prefix(value, marker)

    # Presets may carry their own plugin lists.
    _normalize_lists(item, marker)
    return item


def _normalize_lists(container: dict[str, Any], marker: str) -> None:
    for name in _PATH_LISTS:
        entries = container.get(name)
        if isinstance(entries, list):
            container[name] = [_normalize_item(entry, marker) for entry in entries]


def _canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def normalize_options(options: Any, marker: str = DEPENDENCY_MARKER) -> Any:
    """Return a normalized deep copy of *options*.

    The copy is made through a JSON round trip, so tuples become lists and
    the input is never mutated.

    Args:
        options: Arbitrary JSON-compatible transform configuration.
        marker: Dependency directory marker; everything up to and including
            its last occurrence is removed from ``file.request`` and
            ``file.resolved``.

    Returns:
        The normalized copy.

    Raises:
        KeyDerivationError: If *options* is cyclic or not JSON-serializable.
    """
    try:
        copied = json.loads(_canonical_json(options))
    except (TypeError, ValueError) as exc:
        raise KeyDerivationError(f"Options cannot be serialized: {exc}") from exc

    if isinstance(copied, dict):
        _normalize_lists(copied, marker)
    return copied


def derive_key(
    source: str,
    identifier: str,
    options: Any,
    marker: str = DEPENDENCY_MARKER,
) -> str:
    """Derive the cache key for a (source, identifier, options) triple.

    Args:
        source: Source text handed to the transform.
        identifier: Cache-busting salt.
        options: Transform configuration.
        marker: Dependency directory marker used for path normalization.

    Returns:
        A 32-character lowercase hex digest.

    Raises:
        KeyDerivationError: If the triple cannot be serialized.
    """
    payload = {
        "source": source,
        "options": normalize_options(options, marker),
        "identifier": identifier,
    }
    try:
        contents = _canonical_json(payload)
    except (TypeError, ValueError) as exc:
        raise KeyDerivationError(f"Cache key payload cannot be serialized: {exc}") from exc

    return hashlib.md5(contents.encode("utf-8"), usedforsecurity=False).hexdigest()
