"""Cache directory resolution and the temp-directory fallback.

The default directory is project local (``<project root>/.cache/<name>``)
when a project root can be found and is writable, otherwise the system
temp directory. It is resolved once per :class:`DirectoryResolver` and
reused for every request that does not pin its own directory.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from transformcache.exceptions import DirectoryError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_NAME = "transformcache"
PROJECT_MARKERS = ("pyproject.toml", "setup.py", "setup.cfg", "package.json")
CACHE_DIR_ENV = "CACHE_DIR"

_IGNORED_ENV_VALUES = {"true", "false", "1", "0"}


def temp_directory() -> Path:
    """Return the system temp directory, the guaranteed-writable fallback."""
    return Path(tempfile.gettempdir())


def is_temp_directory(directory: Path) -> bool:
    return os.path.realpath(directory) == os.path.realpath(temp_directory())


def find_project_root(cwd: Optional[Path] = None) -> Optional[Path]:
    """Return the nearest ancestor of *cwd* that holds a project marker file."""
    start = Path(cwd or Path.cwd()).resolve()
    for candidate in (start, *start.parents):
        if any((candidate / marker).is_file() for marker in PROJECT_MARKERS):
            return candidate
    return None


def find_cache_dir(name: str = DEFAULT_CACHE_NAME, cwd: Optional[Path] = None) -> Optional[Path]:
    """Locate the project-local cache directory for *name*.

    ``$CACHE_DIR/<name>`` wins when the ``CACHE_DIR`` environment variable
    holds a path. Otherwise the directory is ``<root>/.cache/<name>`` where
    ``<root>`` is the nearest project root. The directory is not created.

    Returns:
        The directory, or ``None`` when there is no project root or the
        project cache location is not writable.
    """
    env_dir = os.environ.get(CACHE_DIR_ENV)
    if env_dir and env_dir.lower() not in _IGNORED_ENV_VALUES:
        return Path(env_dir) / name

    root = find_project_root(cwd)
    if root is None:
        return None

    cache_root = root / ".cache"
    if cache_root.exists():
        if not os.access(cache_root, os.W_OK):
            return None
    elif not os.access(root, os.W_OK):
        return None

    return cache_root / name


def ensure_directory(directory: Path) -> None:
    """Create *directory* and its parents if missing.

    Raises:
        DirectoryError: If the directory cannot be created.
    """
    try:
        Path(directory).mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryError(
            Path(directory), f"Cannot create cache directory {directory}: {exc}"
        ) from exc


@dataclass(frozen=True)
class ResolvedDirectory:
    """Where a request's entry lives and whether it may move to the temp dir."""

    path: Path
    pinned: bool = False

    @property
    def can_fall_back(self) -> bool:
        return not self.pinned and not is_temp_directory(self.path)


class DirectoryResolver:
    """Resolves entry directories and remembers the default one.

    Owned by the caller; create one per application (or per test) and pass
    it to :class:`~transformcache.cache.TransformCache`.

    Example::

        resolver = DirectoryResolver(name="my-tool")
        resolver.resolve(None).path   # project cache dir or temp dir
    """

    def __init__(self, name: str = DEFAULT_CACHE_NAME, cwd: Optional[Path] = None) -> None:
        self._name = name
        self._cwd = cwd
        self._default: Optional[Path] = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def resolved_default(self) -> Optional[Path]:
        """The default directory if already resolved, without probing."""
        with self._lock:
            return self._default

    def default_directory(self) -> Path:
        """Return the default directory, resolving it on first use."""
        with self._lock:
            if self._default is None:
                found = find_cache_dir(self._name, self._cwd)
                if found is None:
                    found = temp_directory()
                    logger.debug("No project cache directory; using %s", found)
                self._default = found
            return self._default

    def resolve(self, explicit: Optional[Path]) -> ResolvedDirectory:
        """Pick the directory for one request.

        Args:
            explicit: The request's own directory. When given it is used
                as-is and pins the request (no fallback).
        """
        if explicit is not None:
            return ResolvedDirectory(Path(explicit), pinned=True)
        return ResolvedDirectory(self.default_directory())

    def reset(self) -> None:
        """Forget the resolved default so the next request probes again."""
        with self._lock:
            self._default = None
