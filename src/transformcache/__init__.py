"""transformcache – content-addressed on-disk cache for deterministic transforms.

This package provides:

- :class:`TransformCache` – read-through cache around a transform callable
- :class:`CacheRequest` – the inputs of one lookup
- :class:`DirectoryResolver` – default directory resolution with temp-dir fallback
- :class:`CacheSettings` – TOML / environment configuration
"""

from transformcache.cache import TransformCache, cached_transform
from transformcache.config import CacheSettings, load_settings
from transformcache.directories import DirectoryResolver, find_cache_dir
from transformcache.exceptions import (
    CacheError,
    CacheWriteError,
    ConfigError,
    CorruptEntryError,
    DirectoryError,
    KeyDerivationError,
)
from transformcache.keys import derive_key, normalize_options
from transformcache.logging_setup import setup_logging
from transformcache.models import CacheRequest, Transform

__version__ = "0.1.0"

__all__ = [
    "CacheError",
    "CacheRequest",
    "CacheSettings",
    "CacheWriteError",
    "ConfigError",
    "CorruptEntryError",
    "DirectoryError",
    "DirectoryResolver",
    "KeyDerivationError",
    "Transform",
    "TransformCache",
    "cached_transform",
    "derive_key",
    "find_cache_dir",
    "load_settings",
    "normalize_options",
    "setup_logging",
]
