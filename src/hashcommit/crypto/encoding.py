"""Canonical encoding of secrets into bytes.

A commitment is only as good as the encoding beneath it: logically equal
secrets must always produce byte-identical encodings, and distinguishable
secrets must never collide. This module provides the default encoder.
It keeps the fixed-int, little-endian layout of bincode, but because a
Python field can hold values of any type, every value is preceded by a
one-byte type tag:

- Integers are 8-byte signed, floats 8-byte IEEE-754 doubles.
- Variable-length values (str, bytes, tuple, list, set, dict) carry a
  u64 length prefix after the tag.
- Sets and dicts are ordered by the encoding of their elements/keys.
- Enum members and dataclass instances carry their class name.

"Equal" means equal value of the same kind: ``1``, ``1.0`` and ``True``
compare equal in Python but encode differently. Floats are compared by
value, so ``-0.0`` encodes as ``0.0`` and every NaN as one quiet NaN.

FixedBytes is the exception: it is written raw, with no tag and no
length, exactly like a ``[u8; N]`` array. It is injective only against
FixedBytes of the same length, so a position that holds FixedBytes must
always hold FixedBytes of that length.

Any other callable with the same contract can be injected into the
commitment routines in place of ``encode``.
"""

from __future__ import annotations

import dataclasses
import enum
import math
import struct
from dataclasses import dataclass
from typing import Any, Callable


# Maximum container nesting accepted before the value is rejected.
MAX_DEPTH = 64

_I64_MIN = -(2 ** 63)
_I64_MAX = 2 ** 63 - 1

# One-byte type tags.
TAG_NONE = 0x00
TAG_BOOL = 0x01
TAG_INT = 0x02
TAG_FLOAT = 0x03
TAG_STR = 0x04
TAG_BYTES = 0x05
TAG_TUPLE = 0x06
TAG_LIST = 0x07
TAG_SET = 0x08
TAG_DICT = 0x09
TAG_ENUM = 0x0A
TAG_FLAG = 0x0B
TAG_STRUCT = 0x0C

_CANONICAL_NAN = struct.pack("<Q", 0x7FF8000000000000)

Encoder = Callable[[Any], bytes]


class EncodingError(Exception):
    """Raised when a value cannot be deterministically encoded."""


@dataclass(frozen=True)
class FixedBytes:
    """A fixed-size byte array, encoded raw with no tag or length prefix."""
    data: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.data, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"FixedBytes requires bytes-like data, got {type(self.data).__name__}"
            )
        # Freeze a private copy so later mutation of the source is not seen.
        object.__setattr__(self, "data", bytes(self.data))

    def __len__(self) -> int:
        return len(self.data)


def encode(value: Any) -> bytes:
    """Encode a value into its canonical byte form.

    Raises EncodingError for unsupported types, integers outside the
    i64 range, unencodable text, and structures nested deeper than
    MAX_DEPTH (which includes cyclic ones).
    """
    out = bytearray()
    _encode_into(out, value, 0)
    return bytes(out)


def _encode_into(out: bytearray, value: Any, depth: int) -> None:
    if depth > MAX_DEPTH:
        raise EncodingError(f"Nesting exceeds maximum depth of {MAX_DEPTH}")

    # bool, Flag and Enum must be checked before int (IntEnum, bool are ints).
    if value is None:
        out.append(TAG_NONE)
    elif isinstance(value, bool):
        out.append(TAG_BOOL)
        out += b"\x01" if value else b"\x00"
    elif isinstance(value, enum.Flag):
        out.append(TAG_FLAG)
        _write_text(out, type(value).__qualname__)
        out += _pack_int(value.value)
    elif isinstance(value, enum.Enum):
        out.append(TAG_ENUM)
        _write_text(out, type(value).__qualname__)
        out += struct.pack("<I", _variant_index(value))
    elif isinstance(value, int):
        out.append(TAG_INT)
        out += _pack_int(value)
    elif isinstance(value, float):
        out.append(TAG_FLOAT)
        out += _pack_float(value)
    elif isinstance(value, str):
        out.append(TAG_STR)
        _write_text(out, value)
    elif isinstance(value, FixedBytes):
        out += value.data
    elif isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        out.append(TAG_BYTES)
        _write_len(out, len(raw))
        out += raw
    elif isinstance(value, (tuple, list)):
        out.append(TAG_TUPLE if isinstance(value, tuple) else TAG_LIST)
        _write_len(out, len(value))
        for item in value:
            _encode_into(out, item, depth + 1)
    elif isinstance(value, (set, frozenset)):
        items = sorted(_encode_nested(item, depth + 1) for item in value)
        out.append(TAG_SET)
        _write_len(out, len(items))
        for item in items:
            out += item
    elif isinstance(value, dict):
        pairs = sorted(
            (_encode_nested(k, depth + 1), _encode_nested(v, depth + 1))
            for k, v in value.items()
        )
        out.append(TAG_DICT)
        _write_len(out, len(pairs))
        for key, val in pairs:
            out += key
            out += val
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = dataclasses.fields(value)
        out.append(TAG_STRUCT)
        _write_text(out, type(value).__qualname__)
        _write_len(out, len(fields))
        for f in fields:
            _encode_into(out, getattr(value, f.name), depth + 1)
    else:
        raise EncodingError(f"Unsupported type: {type(value).__name__}")


def _encode_nested(value: Any, depth: int) -> bytes:
    buf = bytearray()
    _encode_into(buf, value, depth)
    return bytes(buf)


def _write_len(out: bytearray, length: int) -> None:
    out += struct.pack("<Q", length)


def _write_text(out: bytearray, text: str) -> None:
    try:
        raw = text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingError(f"String is not valid UTF-8: {exc}") from exc
    _write_len(out, len(raw))
    out += raw


def _pack_int(value: int) -> bytes:
    if not _I64_MIN <= value <= _I64_MAX:
        raise EncodingError(f"Integer out of i64 range: {value}")
    return struct.pack("<q", value)


def _pack_float(value: float) -> bytes:
    if math.isnan(value):
        return _CANONICAL_NAN
    # -0.0 == 0.0, so both take the +0.0 encoding.
    return struct.pack("<d", 0.0 if value == 0.0 else value)


def _variant_index(member: enum.Enum) -> int:
    """Position of a member in its enum's definition order (aliases excluded)."""
    try:
        return list(type(member)).index(member)
    except ValueError as exc:
        raise EncodingError(f"Enum value {member!r} is not a defined member") from exc
