"""Transform cache configuration management.

Loads settings from a TOML file with environment variable overrides
(``TRANSFORMCACHE_`` prefix).  Uses :mod:`tomllib` on Python 3.11+.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError, field_validator

from transformcache.directories import DEFAULT_CACHE_NAME
from transformcache.exceptions import ConfigError
from transformcache.keys import DEPENDENCY_MARKER
from transformcache.models import CacheRequest

# ---------------------------------------------------------------------------
# Default paths
# ---------------------------------------------------------------------------

DEFAULT_CONFIG_DIR = ".transformcache"
DEFAULT_CONFIG_FILE = "config.toml"
ENV_PREFIX = "TRANSFORMCACHE_"

# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class CacheSettings(BaseModel):
    """Cache settings with sensible defaults.

    All fields can be overridden via environment variables with the
    ``TRANSFORMCACHE_`` prefix.  For example
    ``TRANSFORMCACHE_CACHE_COMPRESSION=false``.
    """

    cache_directory: Optional[Path] = None
    cache_identifier: str = ""
    cache_compression: bool = True
    cache_name: str = DEFAULT_CACHE_NAME
    dependency_marker: str = DEPENDENCY_MARKER
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = {"extra": "ignore"}

    @field_validator("cache_directory", "log_file", mode="before")
    @classmethod
    def _empty_path_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def build_request(self, source: str, options: Any = None) -> CacheRequest:
        """Create a :class:`CacheRequest` for *source* using these settings."""
        return CacheRequest(
            source=source,
            options={} if options is None else options,
            identifier=self.cache_identifier,
            cache_directory=self.cache_directory,
            compression=self.cache_compression,
        )


# ---------------------------------------------------------------------------
# Loader helpers
# ---------------------------------------------------------------------------


def _apply_env_overrides(data: dict) -> dict:
    """Apply TRANSFORMCACHE_ environment variable overrides to *data*."""
    field_names = set(CacheSettings.model_fields.keys())
    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            field = key[len(ENV_PREFIX):].lower()
            if field in field_names:
                data[field] = value
    return data


def load_settings(
    config_path: Path | None = None,
    project_dir: Path | None = None,
) -> CacheSettings:
    """Load settings from a TOML file with env-var overrides.

    Parameters
    ----------
    config_path:
        Explicit path to a TOML file.  When *None*, looks for
        ``<project_dir>/.transformcache/config.toml``.
    project_dir:
        Project root directory.  Defaults to :func:`Path.cwd`.

    Returns
    -------
    CacheSettings
        Parsed and validated settings.

    Raises
    ------
    ConfigError
        If the file is not valid TOML or a value fails validation.
    """
    project = project_dir or Path.cwd()
    path = config_path or (project / DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILE)

    data: dict = {}
    if path.exists():
        try:
            with open(path, "rb") as fh:
                data = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid configuration file {path}: {exc}") from exc

    # Flatten nested TOML sections if present
    flat: dict = {}
    for k, v in data.items():
        if isinstance(v, dict):
            flat.update(v)
        else:
            flat[k] = v

    flat = _apply_env_overrides(flat)
    try:
        return CacheSettings(**flat)
    except ValidationError as exc:
        raise ConfigError(f"Invalid cache settings: {exc}") from exc


def default_config_toml() -> str:
    """Return default configuration as a TOML string."""
    return f"""\
# Transform cache configuration

[cache]
# cache_directory = ".cache/{DEFAULT_CACHE_NAME}"
cache_identifier = ""
cache_compression = true
cache_name = "{DEFAULT_CACHE_NAME}"
dependency_marker = "{DEPENDENCY_MARKER}"

[logging]
log_level = "INFO"
"""
