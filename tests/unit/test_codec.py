"""Unit tests for transformcache.codec."""

from __future__ import annotations

import gzip

import pytest

from transformcache.codec import decode, encode
from transformcache.exceptions import CorruptEntryError

RESULTS = [
    {"code": "var a = 1;", "map": None, "metadata": {"usedHelpers": ["x"]}},
    ["a", 1, 2.5, True, None],
    "plain string with ünïcode ☃",
    0,
    None,
]


class TestRoundTrip:
    """decode(encode(r)) == r for JSON values, compressed or not."""

    @pytest.mark.parametrize("compress", [False, True])
    @pytest.mark.parametrize("result", RESULTS)
    def test_round_trip(self, result, compress: bool) -> None:
        assert decode(encode(result, compress), compress) == result


class TestEncode:
    def test_uncompressed_is_json(self) -> None:
        assert encode({"a": 1}, False) == b'{"a": 1}'

    def test_compressed_is_gzip(self) -> None:
        data = encode({"a": 1}, True)
        assert data[:2] == b"\x1f\x8b"
        assert gzip.decompress(data) == b'{"a": 1}'

    def test_non_serializable_raises_type_error(self) -> None:
        with pytest.raises(TypeError):
            encode({"fn": object()}, False)


class TestDecode:
    """Undecodable payloads raise CorruptEntryError."""

    def test_garbage_json(self) -> None:
        with pytest.raises(CorruptEntryError):
            decode(b"{not json", False)

    def test_invalid_utf8(self) -> None:
        with pytest.raises(CorruptEntryError):
            decode(b"\xff\xfe\xfa", False)

    def test_plain_bytes_read_as_gzip(self) -> None:
        with pytest.raises(CorruptEntryError):
            decode(b'{"a": 1}', True)

    def test_truncated_gzip(self) -> None:
        data = encode({"a": list(range(100))}, True)
        with pytest.raises(CorruptEntryError):
            decode(data[: len(data) // 2], True)

    def test_empty_payload(self) -> None:
        with pytest.raises(CorruptEntryError):
            decode(b"", False)
