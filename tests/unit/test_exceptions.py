"""Unit tests for transform cache exceptions."""

from __future__ import annotations

from pathlib import Path

import pytest

from transformcache.exceptions import (
    CacheError,
    CacheWriteError,
    ConfigError,
    CorruptEntryError,
    DirectoryError,
    KeyDerivationError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_type",
        [KeyDerivationError, CorruptEntryError, DirectoryError, CacheWriteError, ConfigError],
    )
    def test_subclass_of_cache_error(self, exc_type: type) -> None:
        assert issubclass(exc_type, CacheError)

    def test_cache_error_is_exception(self) -> None:
        assert issubclass(CacheError, Exception)

    def test_caught_as_base_class(self) -> None:
        with pytest.raises(CacheError):
            raise KeyDerivationError("cycle")


class TestDirectoryError:
    def test_attributes(self) -> None:
        err = DirectoryError(Path("/nope"), "cannot create")
        assert err.directory == Path("/nope")
        assert str(err) == "cannot create"


class TestCacheWriteError:
    def test_attributes(self) -> None:
        err = CacheWriteError(Path("/x/k.json"), "disk full", result={"code": "a"})
        assert err.path == Path("/x/k.json")
        assert err.result == {"code": "a"}
        assert "disk full" in str(err)

    def test_result_defaults_to_none(self) -> None:
        assert CacheWriteError(Path("k.json"), "failed").result is None
