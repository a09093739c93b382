"""
Snapshot Codec Module

Binary encoding of a store's entry map. Payloads are restricted to a
closed set of tagged kinds, so no type registration happens at runtime
and every unsupported value is rejected before anything is written.

Snapshot layout (all integers big-endian):
    magic       6 bytes   b"SNAPC1"
    count       u32
    entries     count x (key, expires_at, value)

    key         u32 length + UTF-8 bytes
    expires_at  i64 nanoseconds since the epoch (0 = never)
    value       1-byte tag + body

Value tags:
    N  None                  (no body)
    T  True / F  False       (no body)
    i  int                   u32 length + two's-complement bytes
    d  float                 f64
    s  str                   u32 length + UTF-8 bytes
    b  bytes / bytearray     u32 length + raw bytes
    l  list / t  tuple       u32 count + values
    S  set / Z  frozenset    u32 count + values
    D  dict                  u32 count + (key value, value) pairs
"""

import struct
from typing import Any, Dict, List

from ..cache.entry import Entry
from ..errors import DeserializationError, SerializationError

MAGIC = b"SNAPC1"

_U32 = struct.Struct(">I")
_I64 = struct.Struct(">q")
_F64 = struct.Struct(">d")

TAG_NONE = b"N"
TAG_TRUE = b"T"
TAG_FALSE = b"F"
TAG_INT = b"i"
TAG_FLOAT = b"d"
TAG_STR = b"s"
TAG_BYTES = b"b"
TAG_LIST = b"l"
TAG_TUPLE = b"t"
TAG_SET = b"S"
TAG_FROZENSET = b"Z"
TAG_DICT = b"D"


class UnsupportedTypeError(TypeError):
    """Raised internally when a value has no tag."""


# ============================================================================
# Encoding
# ============================================================================

def _encode_int(value: int) -> bytes:
    length = (value.bit_length() + 8) // 8
    return value.to_bytes(length, "big", signed=True)


def _encode_text(value: str) -> bytes:
    raw = value.encode("utf-8")
    return _U32.pack(len(raw)) + raw


def _encode_value(value: Any, out: List[bytes]) -> None:
    # bool before int: bool is an int subclass
    if value is None:
        out.append(TAG_NONE)
    elif value is True:
        out.append(TAG_TRUE)
    elif value is False:
        out.append(TAG_FALSE)
    elif isinstance(value, int):
        raw = _encode_int(value)
        out.append(TAG_INT + _U32.pack(len(raw)) + raw)
    elif isinstance(value, float):
        out.append(TAG_FLOAT + _F64.pack(value))
    elif isinstance(value, str):
        out.append(TAG_STR + _encode_text(value))
    elif isinstance(value, (bytes, bytearray)):
        out.append(TAG_BYTES + _U32.pack(len(value)) + bytes(value))
    elif isinstance(value, dict):
        out.append(TAG_DICT + _U32.pack(len(value)))
        for k, v in value.items():
            _encode_value(k, out)
            _encode_value(v, out)
    elif isinstance(value, (list, tuple, set, frozenset)):
        if isinstance(value, list):
            tag = TAG_LIST
        elif isinstance(value, tuple):
            tag = TAG_TUPLE
        elif isinstance(value, frozenset):
            tag = TAG_FROZENSET
        else:
            tag = TAG_SET
        out.append(tag + _U32.pack(len(value)))
        for item in value:
            _encode_value(item, out)
    else:
        raise UnsupportedTypeError(type(value).__name__)


def encode_value(value: Any) -> bytes:
    """
    Encode a single payload.

    Raises:
        SerializationError: If the value (or anything nested in it) has no tag
    """
    out: List[bytes] = []
    try:
        _encode_value(value, out)
    except UnsupportedTypeError as exc:
        raise SerializationError(f"unsupported payload type: {exc}") from exc
    except RecursionError as exc:
        raise SerializationError("payload is nested too deeply") from exc
    except (UnicodeEncodeError, struct.error) as exc:
        raise SerializationError(f"cannot encode payload: {exc}") from exc
    return b"".join(out)


def encode_entries(entries: Dict[str, Entry]) -> bytes:
    """
    Encode a full entry map into snapshot bytes.

    The whole snapshot is built in memory, so a failure on any entry
    produces no output at all.

    Raises:
        SerializationError: If any payload cannot be encoded
    """
    out: List[bytes] = [MAGIC, _U32.pack(len(entries))]
    for key, entry in entries.items():
        if not isinstance(key, str):
            raise SerializationError(
                f"cannot encode item {key!r}: key must be str, not {type(key).__name__}"
            )
        try:
            out.append(_encode_text(key))
            out.append(_I64.pack(entry.expires_at))
            _encode_value(entry.payload, out)
        except UnsupportedTypeError as exc:
            raise SerializationError(
                f"cannot encode item {key!r}: unsupported payload type {exc}"
            ) from exc
        except (RecursionError, UnicodeEncodeError, struct.error) as exc:
            raise SerializationError(f"cannot encode item {key!r}: {exc}") from exc
    return b"".join(out)


# ============================================================================
# Decoding
# ============================================================================

class _Reader:
    """Cursor over snapshot bytes; every read is bounds-checked."""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def take(self, size: int) -> bytes:
        end = self.pos + size
        if end > len(self.data):
            raise DeserializationError(
                f"truncated snapshot: need {size} bytes at offset {self.pos}"
            )
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def u32(self) -> int:
        return _U32.unpack(self.take(_U32.size))[0]

    def i64(self) -> int:
        return _I64.unpack(self.take(_I64.size))[0]

    def text(self) -> str:
        raw = self.take(self.u32())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DeserializationError(f"invalid UTF-8 at offset {self.pos}") from exc

    def value(self) -> Any:
        tag = self.take(1)
        if tag == TAG_NONE:
            return None
        if tag == TAG_TRUE:
            return True
        if tag == TAG_FALSE:
            return False
        if tag == TAG_INT:
            return int.from_bytes(self.take(self.u32()), "big", signed=True)
        if tag == TAG_FLOAT:
            return _F64.unpack(self.take(_F64.size))[0]
        if tag == TAG_STR:
            return self.text()
        if tag == TAG_BYTES:
            return self.take(self.u32())
        if tag in (TAG_LIST, TAG_TUPLE, TAG_SET, TAG_FROZENSET):
            items = [self.value() for _ in range(self.u32())]
            return self._build_sequence(tag, items)
        if tag == TAG_DICT:
            pairs = [(self.value(), self.value()) for _ in range(self.u32())]
            try:
                return dict(pairs)
            except TypeError as exc:
                raise DeserializationError(f"unhashable dict key: {exc}") from exc
        raise DeserializationError(f"unknown value tag {tag!r} at offset {self.pos - 1}")

    @staticmethod
    def _build_sequence(tag: bytes, items: List[Any]) -> Any:
        if tag == TAG_LIST:
            return items
        if tag == TAG_TUPLE:
            return tuple(items)
        try:
            return set(items) if tag == TAG_SET else frozenset(items)
        except TypeError as exc:
            raise DeserializationError(f"unhashable set member: {exc}") from exc


def decode_value(data: bytes) -> Any:
    """Decode a single payload produced by encode_value()."""
    reader = _Reader(data)
    try:
        value = reader.value()
    except RecursionError as exc:
        raise DeserializationError("payload is nested too deeply") from exc
    if reader.pos != len(data):
        raise DeserializationError("trailing bytes after value")
    return value


def decode_entries(data: bytes) -> Dict[str, Entry]:
    """
    Decode snapshot bytes into a fresh entry map.

    Raises:
        DeserializationError: On bad magic, unknown tags, truncation,
            invalid text, or trailing bytes
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise DeserializationError(
            f"snapshot data must be bytes, not {type(data).__name__}"
        )
    data = bytes(data)
    if not data.startswith(MAGIC):
        raise DeserializationError("not a snapshot: bad magic header")

    reader = _Reader(data)
    reader.take(len(MAGIC))
    entries: Dict[str, Entry] = {}
    try:
        for _ in range(reader.u32()):
            key = reader.text()
            expires_at = reader.i64()
            entries[key] = Entry(reader.value(), expires_at)
    except RecursionError as exc:
        raise DeserializationError("payload is nested too deeply") from exc

    if reader.pos != len(data):
        raise DeserializationError(
            f"trailing bytes after snapshot: {len(data) - reader.pos}"
        )
    return entries
