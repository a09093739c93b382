"""
Tests for the snapshot codec

These tests verify:
- Every supported payload kind survives encoding
- Unsupported payloads are rejected with the offending key named
- Malformed input is rejected with DeserializationError

Run with: python -m pytest tests/test_codec.py -v
"""

import struct

import pytest

from snapcache.cache.entry import Entry
from snapcache.errors import DeserializationError, SerializationError
from snapcache.persistence.codec import (
    MAGIC,
    decode_entries,
    decode_value,
    encode_entries,
    encode_value,
)


class TestCodecValues:
    """Test payload encoding."""

    def test_mixed_payload(self):
        """Test a nested payload using every tag comes back equal."""
        payload = {
            "none": None,
            "flags": (True, False),
            "ints": [0, -1, 255, -256, 2**70, -(2**70)],
            "float": 3.5,
            "text": "héllo ✓",
            "raw": b"\x00\xff",
            "tags": {"a", "b"},
            "frozen": frozenset({1, 2}),
            42: "int key",
            (1, 2): "tuple key",
        }
        assert decode_value(encode_value(payload)) == payload

    def test_bool_is_not_int(self):
        """Test bools keep their type."""
        assert decode_value(encode_value(True)) is True
        assert decode_value(encode_value([1, True]))[1] is True

    def test_bytearray_decodes_as_bytes(self):
        assert decode_value(encode_value(bytearray(b"ab"))) == b"ab"

    def test_unsupported_type(self):
        with pytest.raises(SerializationError):
            encode_value(object())

    def test_unsupported_nested_type(self):
        with pytest.raises(SerializationError):
            encode_value({"ok": [1, 2, object()]})


class TestCodecEntries:
    """Test full snapshot encoding."""

    def test_entries_keep_deadlines(self):
        entries = {
            "a": Entry("x", 0),
            "b": Entry([1, 2], 1_700_000_000_000_000_000),
        }
        data = encode_entries(entries)

        assert data.startswith(MAGIC)
        assert decode_entries(data) == entries

    def test_empty_map(self):
        assert decode_entries(encode_entries({})) == {}

    def test_unsupported_payload_names_key(self):
        entries = {"good": Entry(1, 0), "bad": Entry(object(), 0)}
        with pytest.raises(SerializationError, match="bad"):
            encode_entries(entries)

    def test_surrogate_payload(self):
        """Test a str that is not valid UTF-8 is rejected as unencodable."""
        with pytest.raises(SerializationError, match="k"):
            encode_entries({"k": Entry("\ud800", 0)})
        with pytest.raises(SerializationError):
            encode_value(["\ud800"])

    def test_surrogate_key(self):
        with pytest.raises(SerializationError):
            encode_entries({"\udcff": Entry(1, 0)})

    def test_non_str_key(self):
        with pytest.raises(SerializationError, match="key must be str"):
            encode_entries({1: Entry("x", 0)})

    def test_deadline_out_of_range(self):
        with pytest.raises(SerializationError):
            encode_entries({"k": Entry("x", 2**64)})


class TestCodecMalformed:
    """Test rejection of malformed snapshots."""

    def test_bad_magic(self):
        with pytest.raises(DeserializationError):
            decode_entries(b"NOPE!!" + struct.pack(">I", 0))

    def test_empty_input(self):
        with pytest.raises(DeserializationError):
            decode_entries(b"")

    def test_truncated(self):
        data = encode_entries({"key": Entry("value", 0)})
        for cut in (len(MAGIC) + 2, len(data) - 1):
            with pytest.raises(DeserializationError):
                decode_entries(data[:cut])

    def test_trailing_bytes(self):
        data = encode_entries({"key": Entry("value", 0)})
        with pytest.raises(DeserializationError):
            decode_entries(data + b"\x00")

    def test_unknown_tag(self):
        data = MAGIC + struct.pack(">I", 1) + struct.pack(">I", 1) + b"k" + struct.pack(">q", 0) + b"?"
        with pytest.raises(DeserializationError, match="unknown value tag"):
            decode_entries(data)

    def test_invalid_utf8_key(self):
        data = MAGIC + struct.pack(">I", 1) + struct.pack(">I", 1) + b"\xff" + struct.pack(">q", 0) + b"N"
        with pytest.raises(DeserializationError):
            decode_entries(data)

    def test_unhashable_dict_key(self):
        # dict with a single list key
        value = b"D" + struct.pack(">I", 1) + b"l" + struct.pack(">I", 0) + b"N"
        with pytest.raises(DeserializationError):
            decode_value(value)

    def test_text_input_rejected(self):
        with pytest.raises(DeserializationError):
            decode_entries("SNAPC1")
