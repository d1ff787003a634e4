# topmark:header:start
#
#   project      : kdlser
#   file         : __init__.py
#   file_relpath : src/kdlser/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""kdlser package.

kdlser encodes Python values as documents in the KDL configuration language. It
offers a compact streaming output and an indented human layout, a set of
representation options for ambiguous shapes, and a small CLI converting JSON or
TOML documents to KDL.
"""

from __future__ import annotations

from kdlser.api import to_bytes_compact, to_string, to_string_compact, to_writer
from kdlser.config.options import MapFormat, MutableOptions, Options
from kdlser.errors import KdlCustomError, KdlError, KdlIOError
from kdlser.format.contract import ProtocolViolation
from kdlser.ser.serializer import Serializer
from kdlser.ser.traverse import (
    F32,
    UNIT,
    Char,
    Integer,
    KdlSerializable,
    Newtype,
    NewtypeVariant,
    Some,
    Struct,
    StructVariant,
    TupleStruct,
    TupleVariant,
    UnitStruct,
    UnitVariant,
)

__all__ = [
    "F32",
    "UNIT",
    "Char",
    "Integer",
    "KdlCustomError",
    "KdlError",
    "KdlIOError",
    "KdlSerializable",
    "MapFormat",
    "MutableOptions",
    "Newtype",
    "NewtypeVariant",
    "Options",
    "ProtocolViolation",
    "Serializer",
    "Some",
    "Struct",
    "StructVariant",
    "TupleStruct",
    "TupleVariant",
    "UnitStruct",
    "UnitVariant",
    "to_bytes_compact",
    "to_string",
    "to_string_compact",
    "to_writer",
]
