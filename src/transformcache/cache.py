"""Read-through filesystem cache around an expensive transform.

Given a source text, its options and a cache identifier, return the
previously stored transform result or compute, store and return it::

    cache = TransformCache(my_transform)
    result = cache.get(
        CacheRequest(
            source=text,
            options={"presets": [...]},
            identifier="my-tool@1.2.0",
            compression=False,
        )
    )

When the default cache directory cannot be used, the entry goes to the
system temp directory instead. Requests that pin ``cache_directory`` never
fall back.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from transformcache.codec import encode
from transformcache.directories import (
    DirectoryResolver,
    ResolvedDirectory,
    ensure_directory,
    temp_directory,
)
from transformcache.exceptions import CacheWriteError, DirectoryError
from transformcache.keys import DEPENDENCY_MARKER, derive_key
from transformcache.models import CacheRequest, Transform
from transformcache.store import MISS, entry_path, try_read, write_entry

if TYPE_CHECKING:
    from transformcache.config import CacheSettings

logger = logging.getLogger(__name__)


class TransformCache:
    """Memoizes a transform on disk, keyed by its normalized inputs.

    Thread safety: ``get`` holds no lock. Concurrent misses on the same key
    may both run the transform; the last write wins.
    """

    def __init__(
        self,
        transform: Transform,
        resolver: Optional[DirectoryResolver] = None,
        marker: str = DEPENDENCY_MARKER,
    ) -> None:
        self._transform = transform
        self._resolver = resolver or DirectoryResolver()
        self._marker = marker
        self._hits = 0
        self._misses = 0

    @classmethod
    def from_settings(
        cls,
        transform: Transform,
        settings: "CacheSettings",
        resolver: Optional[DirectoryResolver] = None,
    ) -> "TransformCache":
        """Build a cache using the name and marker from *settings*."""
        return cls(
            transform,
            resolver=resolver or DirectoryResolver(name=settings.cache_name),
            marker=settings.dependency_marker,
        )

    @property
    def resolver(self) -> DirectoryResolver:
        return self._resolver

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups served from disk (0.0 before any lookup)."""
        total = self._hits + self._misses
        return self._hits / total if total else 0.0

    @property
    def stats(self) -> dict[str, Any]:
        """Counters plus the default directory, if it has been resolved yet."""
        default = self._resolver.resolved_default
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self.hit_rate,
            "default_directory": str(default) if default is not None else None,
        }

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def key_for(self, request: CacheRequest) -> str:
        """Return the cache key *request* maps to."""
        return derive_key(request.source, request.identifier, request.options, self._marker)

    def get(self, request: CacheRequest) -> Any:
        """Return the cached result for *request*, computing it on a miss.

        Args:
            request: Transform inputs and cache settings.

        Returns:
            The transform result, from disk or freshly computed.

        Raises:
            KeyDerivationError: If the inputs cannot be serialized.
            DirectoryError: If no usable directory exists before the
                transform ran and no fallback is allowed (or the fallback
                failed too).
            CacheWriteError: If the computed result cannot be stored, either
                because it has no JSON form or because every allowed
                directory failed. The result is available as ``exc.result``.
            Exception: Whatever the transform raises, unchanged.
        """
        target = self._resolver.resolve(request.cache_directory)
        key = self.key_for(request)
        compress = request.compression

        computed = False
        result: Any = None
        data = b""
        retried = False

        while True:
            path = entry_path(target.path, key, compress)
            fallback = target.can_fall_back and not retried

            if not computed:
                cached = try_read(path, compress)
                if cached is not MISS:
                    self._hits += 1
                    return cached

            try:
                ensure_directory(target.path)
            except DirectoryError as exc:
                if fallback:
                    target = self._fall_back(target, exc)
                    retried = True
                    continue
                if not computed:
                    raise
                # The result exists; only storing it failed.
                raise CacheWriteError(
                    path, f"Cannot store cache entry {path}: {exc}", result
                ) from exc

            if not computed:
                self._misses += 1
                result = self._transform(request.source, request.options)
                computed = True
                # No directory can store a result without a JSON form.
                data = self._encode(path, result, compress)

            try:
                write_entry(path, data)
            except CacheWriteError as exc:
                if not fallback:
                    exc.result = result
                    raise
                target = self._fall_back(target, exc)
                retried = True
                continue

            return result

    @staticmethod
    def _encode(path: Path, result: Any, compress: bool) -> bytes:
        try:
            return encode(result, compress)
        except (TypeError, ValueError) as exc:
            logger.warning("Not caching result for %s: %s", path.name, exc)
            raise CacheWriteError(
                path, f"Transform result cannot be serialized: {exc}", result
            ) from exc

    @staticmethod
    def _fall_back(current: ResolvedDirectory, exc: Exception) -> ResolvedDirectory:
        tmp = temp_directory()
        logger.warning("Cache directory %s unusable (%s); falling back to %s", current.path, exc, tmp)
        return ResolvedDirectory(tmp)


# ---------------------------------------------------------------------------
# Convenience function
# ---------------------------------------------------------------------------

_default_resolver = DirectoryResolver()


def cached_transform(
    transform: Transform,
    source: str,
    options: Any = None,
    *,
    identifier: str = "",
    cache_directory: Optional[Path] = None,
    compression: bool = True,
) -> Any:
    """One-shot read-through lookup sharing a process-wide default directory.

    Prefer :class:`TransformCache` with an owned resolver in long-lived
    code; this helper exists for scripts.
    """
    request = CacheRequest(
        source=source,
        options={} if options is None else options,
        identifier=identifier,
        cache_directory=cache_directory,
        compression=compression,
    )
    return TransformCache(transform, resolver=_default_resolver).get(request)
