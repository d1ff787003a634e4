# topmark:header:start
#
#   project      : kdlser
#   file         : traverse.py
#   file_relpath : src/kdlser/ser/traverse.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Walk Python values and issue one serializer call per value shape.

Python values carry less shape information than the KDL data model, so plain
values map to the closest shape and explicit *markers* name the others:

| Python value                              | Shape                         |
|-------------------------------------------|-------------------------------|
| `KdlSerializable` (``kdl_serialize``)     | whatever the method does      |
| `UNIT`, `UnitStruct`, `Some`, `Newtype`   | unit, unit struct, some, newtype struct |
| `Struct`, `TupleStruct`                   | struct, tuple struct          |
| `*Variant` markers                        | enum variants                 |
| `Integer`, `F32`, `Char`                  | explicitly sized scalars      |
| `enum.Enum` member                        | unit variant                  |
| `bool`, `int`, `float`, `str`             | bool, smallest of i64/u64/i128/u128, f64, str |
| `bytes`, `bytearray`, `memoryview`        | bytes                         |
| `None`                                    | none                          |
| `PurePath`, `date`/`time`/`datetime`      | str (``str()`` / ISO 8601)    |
| dataclass instance                        | struct (unit struct without fields) |
| `NamedTuple`                              | struct                        |
| `Mapping`                                 | map, in iteration order       |
| `tuple`, other `Sequence`                 | tuple, seq                    |
| `set`, `frozenset`                        | seq, sorted                   |

Dataclass fields honour two metadata keys: ``kdl_name`` (rename the field) and
``kdl_skip`` (omit it).
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import enum
from collections.abc import Mapping, Sequence
from pathlib import PurePath
from typing import TYPE_CHECKING, Any, Final, Protocol, runtime_checkable

from kdlser.config.logging import get_logger
from kdlser.constants import INT_BOUNDS
from kdlser.errors import KdlError

if TYPE_CHECKING:
    from kdlser.config.logging import KdlserLogger
    from kdlser.ser.serializer import Serializer

logger: KdlserLogger = get_logger(__name__)


@runtime_checkable
class KdlSerializable(Protocol):
    """A value that drives the serializer itself."""

    def kdl_serialize(self, serializer: Serializer[Any]) -> None:
        """Issue the serializer calls describing ``self``."""
        ...


class _Unit:
    """The unit value ``()``."""

    _instance: _Unit | None = None

    def __new__(cls) -> _Unit:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNIT"


UNIT: Final[_Unit] = _Unit()


@dataclasses.dataclass(frozen=True)
class UnitStruct:
    """A named struct without fields."""

    name: str


@dataclasses.dataclass(frozen=True)
class Some:
    """A present optional (distinguishes ``Some(None)`` from ``None``).

    With ``option_as_enum`` the value is written as the ``Some`` newtype variant, so
    ``Some(None)`` and ``Some`` around another variant nest two variants directly;
    that raises ``ProtocolViolation`` unless ``newtype_as_tuple`` is also set.
    """

    value: Any


@dataclasses.dataclass(frozen=True)
class Newtype:
    """A named wrapper around a single value."""

    name: str
    value: Any


@dataclasses.dataclass(frozen=True)
class Struct:
    """A named struct whose fields are only known at runtime (written in mapping order)."""

    name: str
    fields: Mapping[str, Any]


@dataclasses.dataclass(frozen=True)
class TupleStruct:
    """A named positional group."""

    name: str
    values: tuple[Any, ...]


@dataclasses.dataclass(frozen=True)
class UnitVariant:
    """Enum variant without data.

    Attributes:
        name (str): Enclosing enum type name.
        index (int): Variant index in definition order.
        variant (str): Variant name, written as the type annotation.
    """

    name: str
    index: int
    variant: str


@dataclasses.dataclass(frozen=True)
class NewtypeVariant:
    """Enum variant wrapping a single value."""

    name: str
    index: int
    variant: str
    value: Any


@dataclasses.dataclass(frozen=True)
class TupleVariant:
    """Enum variant with positional values."""

    name: str
    index: int
    variant: str
    values: tuple[Any, ...]


@dataclasses.dataclass(frozen=True)
class StructVariant:
    """Enum variant with named fields (written in mapping order)."""

    name: str
    index: int
    variant: str
    fields: Mapping[str, Any]


@dataclasses.dataclass(frozen=True)
class Integer:
    """An integer of an explicit width (``"i8"`` ... ``"u128"``)."""

    value: int
    kind: str = "i64"


@dataclasses.dataclass(frozen=True)
class F32:
    """A binary32 float."""

    value: float


@dataclasses.dataclass(frozen=True)
class Char:
    """A single character."""

    value: str


# Widths tried, in order, for plain Python ints.
_INT_KINDS: Final[tuple[str, ...]] = ("i64", "u64", "i128", "u128")


def _serialize_int(value: int, ser: Serializer[Any]) -> None:
    for kind in _INT_KINDS:
        low, high = INT_BOUNDS[kind]
        if low <= value <= high:
            getattr(ser, f"serialize_{kind}")(value)
            return
    raise KdlError.custom(f"integer {value} does not fit in 128 bits")


def _serialize_marker(value: Any, ser: Serializer[Any]) -> bool:
    """Serialize a shape marker; return False if ``value`` is not a marker."""
    if isinstance(value, _Unit):
        ser.serialize_unit()
    elif isinstance(value, UnitStruct):
        ser.serialize_unit_struct(value.name)
    elif isinstance(value, Some):
        ser.serialize_some(value.value)
    elif isinstance(value, Newtype):
        ser.serialize_newtype_struct(value.name, value.value)
    elif isinstance(value, Struct):
        with ser.serialize_struct(value.name, len(value.fields)) as fields:
            for key, item in value.fields.items():
                fields.serialize_field(key, item)
    elif isinstance(value, TupleStruct):
        with ser.serialize_tuple_struct(value.name, len(value.values)) as group:
            for item in value.values:
                group.serialize_element(item)
    elif isinstance(value, UnitVariant):
        ser.serialize_unit_variant(value.name, value.index, value.variant)
    elif isinstance(value, NewtypeVariant):
        ser.serialize_newtype_variant(value.name, value.index, value.variant, value.value)
    elif isinstance(value, TupleVariant):
        with ser.serialize_tuple_variant(
            value.name, value.index, value.variant, len(value.values)
        ) as group:
            for item in value.values:
                group.serialize_element(item)
    elif isinstance(value, StructVariant):
        with ser.serialize_struct_variant(
            value.name, value.index, value.variant, len(value.fields)
        ) as fields:
            for key, item in value.fields.items():
                fields.serialize_field(key, item)
    elif isinstance(value, Integer):
        if value.kind not in INT_BOUNDS:
            raise KdlError.custom(f"unknown integer kind {value.kind!r}")
        getattr(ser, f"serialize_{value.kind}")(value.value)
    elif isinstance(value, F32):
        ser.serialize_f32(value.value)
    elif isinstance(value, Char):
        ser.serialize_char(value.value)
    else:
        return False
    return True


def _serialize_enum_member(value: enum.Enum, ser: Serializer[Any]) -> None:
    enum_type: type[enum.Enum] = type(value)
    try:
        index: int = list(enum_type).index(value)
    except ValueError as exc:
        # Composite flag values (`Perm.R | Perm.W`) are not declared members.
        raise KdlError.custom(
            f"{enum_type.__name__} value {value!r} is not a declared member"
        ) from exc
    ser.serialize_unit_variant(enum_type.__name__, index, value.name)


def _serialize_dataclass(value: Any, ser: Serializer[Any]) -> None:
    type_name: str = type(value).__name__
    fields: tuple[dataclasses.Field[Any], ...] = dataclasses.fields(value)
    if not fields:
        ser.serialize_unit_struct(type_name)
        return
    with ser.serialize_struct(type_name, len(fields)) as group:
        for field in fields:
            name: str = field.metadata.get("kdl_name", field.name)
            if field.metadata.get("kdl_skip", False):
                group.skip_field(name)
                continue
            group.serialize_field(name, getattr(value, field.name))


def _serialize_named_tuple(value: Any, ser: Serializer[Any]) -> None:
    names: tuple[str, ...] = value._fields
    with ser.serialize_struct(type(value).__name__, len(names)) as group:
        for name, item in zip(names, value):
            group.serialize_field(name, item)


def _serialize_set(value: set[Any] | frozenset[Any], ser: Serializer[Any]) -> None:
    try:
        items: list[Any] = sorted(value)
    except TypeError as exc:
        raise KdlError.custom(f"cannot order set elements: {exc}") from exc
    with ser.serialize_seq(len(items)) as group:
        for item in items:
            group.serialize_element(item)


def serialize(value: Any, ser: Serializer[Any]) -> None:
    """Serialize ``value`` through ``ser``.

    Args:
        value (Any): Value to serialize.
        ser (Serializer[Any]): Serializer receiving the shape calls.

    Raises:
        KdlCustomError: If ``value`` has no KDL representation.
    """
    logger.trace("dispatching %s", type(value).__name__)

    if isinstance(value, KdlSerializable):
        value.kdl_serialize(ser)
        return
    if _serialize_marker(value, ser):
        return
    # Before the primitives: IntEnum and StrEnum members are also int/str.
    if isinstance(value, enum.Enum):
        _serialize_enum_member(value, ser)
    elif isinstance(value, bool):
        ser.serialize_bool(value)
    elif isinstance(value, int):
        _serialize_int(value, ser)
    elif isinstance(value, float):
        ser.serialize_f64(value)
    elif isinstance(value, str):
        ser.serialize_str(value)
    elif isinstance(value, (bytes, bytearray, memoryview)):
        ser.serialize_bytes(value)
    elif value is None:
        ser.serialize_none()
    elif isinstance(value, PurePath):
        ser.serialize_str(str(value))
    elif isinstance(value, (dt.date, dt.time)):
        ser.serialize_str(value.isoformat())
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        _serialize_dataclass(value, ser)
    elif isinstance(value, tuple) and hasattr(value, "_fields"):
        _serialize_named_tuple(value, ser)
    elif isinstance(value, Mapping):
        with ser.serialize_map(len(value)) as entries:
            for key, item in value.items():
                entries.serialize_entry(key, item)
    elif isinstance(value, tuple):
        with ser.serialize_tuple(len(value)) as group:
            for item in value:
                group.serialize_element(item)
    elif isinstance(value, Sequence):
        with ser.serialize_seq(len(value)) as group:
            for item in value:
                group.serialize_element(item)
    elif isinstance(value, (set, frozenset)):
        _serialize_set(value, ser)
    else:
        raise KdlError.custom(f"cannot serialize value of type {type(value).__name__}")
