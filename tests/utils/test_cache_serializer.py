# tests/utils/test_cache_serializer.py
"""Tests for inkblog/utils/cache_serializer.py module."""

from datetime import UTC, datetime

import pytest

from inkblog.errors import CacheDecompressionError, CacheDeserializationError
from inkblog.schemas.taxonomy import TagItem
from inkblog.utils.cache_serializer import (
    COMPRESSION_MARKER,
    compress,
    decompress,
    deserialize,
    do_compress,
    serialize,
)


class TestSerialize:
    """Tests for serialize and deserialize."""

    def test_serialize_pydantic_model(self) -> None:
        """Test that models are dumped in JSON mode."""
        result = serialize(TagItem(id=1, name="redis"))
        assert deserialize(result) == {"id": 1, "name": "redis"}

    def test_serialize_datetime_and_set(self) -> None:
        """Test non-JSON-native values are converted."""
        result = deserialize(serialize({"at": datetime(2026, 3, 1, tzinfo=UTC), "ids": {3}}))
        assert result["at"].startswith("2026-03-01T00:00:00")
        assert result["ids"] == [3]

    def test_serialize_non_string_keys(self) -> None:
        """Test integer keys are allowed."""
        assert deserialize(serialize({1: "a"})) == {"1": "a"}

    def test_deserialize_invalid_json(self) -> None:
        """Test invalid JSON raises CacheDeserializationError."""
        with pytest.raises(CacheDeserializationError):
            deserialize("{not json")


class TestCompression:
    """Tests for compress, decompress and do_compress."""

    def test_compress_adds_marker(self) -> None:
        """Test compressed payloads start with the marker and decompress back."""
        data = "x" * 5000
        compressed = compress(data)
        assert compressed.startswith(COMPRESSION_MARKER)
        assert len(compressed) < len(data)
        assert decompress(compressed) == data

    def test_decompress_plain_payload_is_unchanged(self) -> None:
        """Test payloads without the marker pass through."""
        assert decompress('{"a": 1}') == '{"a": 1}'

    def test_decompress_corrupt_payload(self) -> None:
        """Test a marker followed by garbage raises CacheDecompressionError."""
        with pytest.raises(CacheDecompressionError):
            decompress(COMPRESSION_MARKER + "not-base64!!")

    @pytest.mark.parametrize(
        ("size", "expected"),
        [(10, False), (1024, False), (1025, True)],
    )
    def test_do_compress_threshold(self, size: int, expected: bool) -> None:
        """Test the threshold is exclusive."""
        assert do_compress("a" * size, 1024) is expected
