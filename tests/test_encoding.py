"""Tests for canonical encoding — proves encodings are deterministic and unambiguous."""

import enum
import struct
from dataclasses import dataclass
from typing import Optional

import pytest

from hashcommit.crypto.encoding import MAX_DEPTH, EncodingError, FixedBytes, encode


def _len(n: int) -> bytes:
    return struct.pack("<Q", n)


def _text(s: str) -> bytes:
    raw = s.encode("utf-8")
    return _len(len(raw)) + raw


class Suit(enum.Enum):
    CLUBS = "c"
    DIAMONDS = "d"
    HEARTS = "h"


class Colour(enum.Enum):
    RED = "r"
    GREEN = "g"


class Perm(enum.Flag):
    R = 4
    W = 2
    X = 1


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class Size:
    x: int
    y: int


@dataclass(frozen=True)
class Ballot:
    approve: Optional[bool]


class TestScalars:
    def test_none(self) -> None:
        assert encode(None) == b"\x00"

    def test_bool(self) -> None:
        assert encode(True) == b"\x01\x01"
        assert encode(False) == b"\x01\x00"

    def test_int_little_endian_i64(self) -> None:
        assert encode(1) == b"\x02" + b"\x01" + b"\x00" * 7
        assert encode(-1) == b"\x02" + b"\xff" * 8
        assert encode(2 ** 63 - 1) == b"\x02" + b"\xff" * 7 + b"\x7f"

    def test_int_out_of_range(self) -> None:
        with pytest.raises(EncodingError):
            encode(2 ** 63)
        with pytest.raises(EncodingError):
            encode(-(2 ** 63) - 1)

    def test_float(self) -> None:
        assert encode(1.5) == b"\x03" + struct.pack("<d", 1.5)

    def test_signed_zero_canonical(self) -> None:
        assert encode(-0.0) == encode(0.0)

    def test_nan_canonical(self) -> None:
        other_nan = struct.unpack("<d", struct.pack("<Q", 0x7FF8000000000001))[0]
        assert encode(float("nan")) == encode(other_nan)
        assert encode(float("nan")) != encode(float("inf"))

    def test_enum_name_and_index(self) -> None:
        assert encode(Suit.HEARTS) == b"\x0a" + _text("Suit") + b"\x02\x00\x00\x00"

    def test_int_enum_uses_index_not_value(self) -> None:
        class Level(enum.IntEnum):
            LOW = 10
            HIGH = 20

        assert encode(Level.HIGH).endswith(b"\x01\x00\x00\x00")
        assert encode(Level.HIGH) != encode(20)

    def test_enum_classes_distinct(self) -> None:
        assert encode(Suit.CLUBS) != encode(Colour.RED)


class TestFlags:
    def test_composite_flag_encodes(self) -> None:
        assert encode(Perm.R | Perm.W) == b"\x0b" + _text("Perm") + struct.pack("<q", 6)

    def test_flag_values_distinct(self) -> None:
        assert encode(Perm.R | Perm.W) != encode(Perm.R)
        assert encode(Perm(0)) != encode(Perm.X)


class TestSequences:
    def test_str_length_prefixed(self) -> None:
        assert encode("ab") == b"\x04" + _len(2) + b"ab"
        assert encode("é") == b"\x04" + _text("é")

    def test_bytes_length_prefixed(self) -> None:
        assert encode(b"ab") == b"\x05" + _len(2) + b"ab"
        assert encode(bytearray(b"ab")) == encode(b"ab")
        assert encode(memoryview(b"ab")) == encode(b"ab")

    def test_fixed_bytes_raw(self) -> None:
        assert encode(FixedBytes(b"4242")) == b"4242"

    def test_fixed_bytes_requires_bytes(self) -> None:
        with pytest.raises(TypeError):
            FixedBytes("4242")  # type: ignore[arg-type]

    def test_fixed_bytes_copies_source(self) -> None:
        source = bytearray(b"4242")
        fixed = FixedBytes(source)
        source[0] = 0
        assert encode(fixed) == b"4242"
        assert len(fixed) == 4

    def test_invalid_utf8_text(self) -> None:
        with pytest.raises(EncodingError):
            encode("\ud800")

    def test_concatenation_is_unambiguous(self) -> None:
        assert encode(("ab", "c")) != encode(("a", "bc"))
        assert encode([b"ab", b"c"]) != encode([b"a", b"bc"])

    def test_tuple_layout(self) -> None:
        assert encode((True, False)) == b"\x06" + _len(2) + b"\x01\x01\x01\x00"

    def test_list_layout(self) -> None:
        assert encode([True, False]) == b"\x07" + _len(2) + b"\x01\x01\x01\x00"
        assert encode([]) == b"\x07" + _len(0)


class TestCollections:
    def test_set_order_independent(self) -> None:
        assert encode({3, 1, 2}) == encode({2, 3, 1})
        assert encode(frozenset({"a", "b"})) == encode({"b", "a"})

    def test_set_layout(self) -> None:
        assert encode({True}) == b"\x08" + _len(1) + b"\x01\x01"

    def test_dict_order_independent(self) -> None:
        a = {"x": 1, "y": [1, 2], "z": None}
        b = {"z": None, "y": [1, 2], "x": 1}
        assert encode(a) == encode(b)

    def test_dict_layout(self) -> None:
        assert encode({False: True}) == b"\x09" + _len(1) + b"\x01\x00\x01\x01"

    def test_list_order_matters(self) -> None:
        assert encode([1, 2]) != encode([2, 1])

    def test_does_not_mutate_input(self) -> None:
        value = {"b": [3, 1], "a": {5, 4}}
        encode(value)
        assert list(value) == ["b", "a"]
        assert value["b"] == [3, 1]


class TestStructs:
    def test_dataclass_layout(self) -> None:
        assert encode(Point(1, 2)) == (
            b"\x0c" + _text("Point") + _len(2) + encode(1) + encode(2)
        )

    def test_dataclass_type_rejected(self) -> None:
        with pytest.raises(EncodingError):
            encode(Point)


class TestInjectivity:
    """Values one field can hold must never share an encoding."""

    def test_optional_bool(self) -> None:
        encodings = {encode(None), encode(False), encode(True)}
        assert len(encodings) == 3

    def test_optional_int(self) -> None:
        assert len({encode(None), encode(False), encode(0)}) == 3

    def test_none_cannot_pad_into_int(self) -> None:
        """A None followed by bools never spells out an int."""
        assert encode((None,) + (False,) * 7) != encode((2,))
        assert encode([None, False]) != encode([0])

    def test_str_vs_bytes(self) -> None:
        assert encode("ab") != encode(b"ab")
        assert encode(["ab"]) != encode([b"ab"])

    def test_numeric_kinds(self) -> None:
        assert len({encode(1), encode(1.0), encode(True)}) == 3

    def test_tuple_vs_list(self) -> None:
        assert encode((1, 2)) != encode([1, 2])

    def test_nested_tuple_boundaries(self) -> None:
        assert encode(((1,), 2)) != encode(((1, 2),))

    def test_enum_vs_int(self) -> None:
        assert encode(Suit.CLUBS) != encode(0)

    def test_dataclass_vs_tuple(self) -> None:
        assert encode(Point(1, 2)) != encode((1, 2))
        assert encode(Point(1, 2)) != encode(Size(1, 2))

    def test_optional_field(self) -> None:
        abstain = encode(Ballot(approve=None))
        reject = encode(Ballot(approve=False))
        approve = encode(Ballot(approve=True))
        assert len({abstain, reject, approve}) == 3


class TestRejections:
    def test_unsupported_type(self) -> None:
        with pytest.raises(EncodingError, match="Unsupported type: object"):
            encode(object())

    def test_cyclic_structure(self) -> None:
        cyclic: list = []
        cyclic.append(cyclic)
        with pytest.raises(EncodingError):
            encode(cyclic)

    def test_nesting_limit(self) -> None:
        value: list = []
        for _ in range(MAX_DEPTH + 1):
            value = [value]
        with pytest.raises(EncodingError):
            encode(value)

    def test_moderate_nesting_allowed(self) -> None:
        value: list = []
        for _ in range(10):
            value = [value]
        assert encode(value)
