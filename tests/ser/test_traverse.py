# topmark:header:start
#
#   project      : kdlser
#   file         : test_traverse.py
#   file_relpath : tests/ser/test_traverse.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for the mapping from Python values to value shapes."""

from __future__ import annotations

import datetime as dt
import enum
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, NamedTuple

import pytest

from kdlser.api import to_string, to_string_compact
from kdlser.errors import KdlCustomError
from kdlser.ser.traverse import KdlSerializable, Struct
from tests.cargo_models import Point, Refuses
from tests.conftest import parametrize


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"


class Level(enum.IntEnum):
    LOW = 1
    HIGH = 2


class Perm(enum.Flag):
    R = 4
    W = 2


@dataclass
class Empty:
    pass


@dataclass
class Account:
    user_name: str = field(metadata={"kdl_name": "user-name"})
    password: str = field(metadata={"kdl_skip": True})
    active: bool = True


class Version(NamedTuple):
    major: int
    minor: int


@parametrize(
    ("value", "expected"),
    [
        (Color.GREEN, "(GREEN)- null"),
        (Level.HIGH, "(HIGH)- null"),
        (True, "- true"),
        (-3, "- -3"),
        (1.5, "- 1.5"),
        (bytearray(b"hi"), '- "aGk="'),
        (memoryview(b"hi"), '- "aGk="'),
        (PurePosixPath("a/b"), '- r"a/b"'),
        (dt.date(2024, 1, 2), '- r"2024-01-02"'),
        (dt.datetime(2024, 1, 2, 3, 4, 5), '- r"2024-01-02T03:04:05"'),
        (dt.time(12, 30), '- r"12:30:00"'),
        (Empty(), "- null"),
        ((1, "a"), '- { - 1; - r"a"; }'),
        ({3, 1, 2}, "- { - 1; - 2; - 3; }"),
        (frozenset({"b", "a"}), '- { - r"a"; - r"b"; }'),
    ],
)
def test_plain_values(value: Any, expected: str) -> None:
    assert to_string_compact(value) == expected


def test_dataclass_field_metadata() -> None:
    """Fields can be renamed and skipped through dataclass metadata."""
    account = Account(user_name="kat", password="secret")
    assert to_string_compact(account) == '- { user-name r"kat"; active true; }'


def test_named_tuple_is_a_struct() -> None:
    assert to_string_compact(Version(1, 2)) == "- { major 1; minor 2; }"


def test_mapping_keeps_iteration_order() -> None:
    value: OrderedDict[str, int] = OrderedDict([("b", 1), ("a", 2)])
    assert to_string_compact(value) == (
        '- { - { key r"b"; value 1; }; - { key r"a"; value 2; }; }'
    )


def test_runtime_struct() -> None:
    value = Struct("object", {"name": "kdl", "tags": ["a"]})
    assert to_string_compact(value) == '- { name r"kdl"; tags { - r"a"; }; }'
    assert to_string(value) == '\nname r"kdl"\ntags r"a"\n'


def test_kdl_serializable_drives_the_serializer() -> None:
    assert isinstance(Point(1, 2), KdlSerializable)
    assert to_string_compact(Point(1, 2)) == "- { x 1; y 2; }"
    assert to_string_compact([Point(0, 0)]) == "- { - { x 0; y 0; }; }"


def test_custom_error_from_user_code() -> None:
    with pytest.raises(KdlCustomError, match="refusing to serialize"):
        to_string_compact({"value": Refuses()})


def test_unsupported_type() -> None:
    with pytest.raises(KdlCustomError, match="cannot serialize value of type object"):
        to_string_compact(object())


def test_unorderable_set() -> None:
    with pytest.raises(KdlCustomError, match="cannot order set elements"):
        to_string_compact({1, "a"})


def test_flag_member_is_a_unit_variant() -> None:
    assert to_string_compact(Perm.W) == "(W)- null"


def test_composite_flag_value() -> None:
    """Combined flags are not declared members and have no variant index."""
    with pytest.raises(KdlCustomError, match="not a declared member"):
        to_string_compact(Perm.R | Perm.W)


def test_strided_memoryview() -> None:
    view: memoryview = memoryview(b"abcdef")[::2]
    assert not view.c_contiguous
    assert to_string_compact(view) == '- "YWNl"'
    assert to_string(view) == to_string(b"ace")
