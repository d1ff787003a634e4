# topmark:header:start
#
#   project      : kdlser
#   file         : test_compact.py
#   file_relpath : tests/format/test_compact.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for the streaming single-line formatter."""

from __future__ import annotations

import base64
import io
from typing import TYPE_CHECKING

import pytest

from kdlser.api import to_string_compact, to_writer
from kdlser.format.contract import ProtocolViolation
from kdlser.ser.traverse import (
    NewtypeVariant,
    StructVariant,
    TupleVariant,
    UnitVariant,
)
from tests.cargo_models import COMPACT_MANIFEST, kdl_manifest
from tests.conftest import drive_compact

if TYPE_CHECKING:
    from collections.abc import Callable

    from kdlser.format.compact import CompactFormatter


def test_top_level_scalar_uses_placeholder_name() -> None:
    assert to_string_compact(True) == "- true"
    assert to_string_compact(None) == "- null"
    assert to_string_compact("kdl") == '- r"kdl"'


def test_sequence() -> None:
    assert to_string_compact([1, 2]) == "- { - 1; - 2; }"
    assert to_string_compact([]) == "- { }"


def test_cargo_manifest() -> None:
    """A nested document is written as one line of nested braces."""
    assert to_string_compact(kdl_manifest()) == COMPACT_MANIFEST


def test_variants_carry_annotations() -> None:
    """Every variant name is written as a type annotation."""
    assert to_string_compact(UnitVariant("E", 0, "Unit")) == "(Unit)- null"
    assert to_string_compact(NewtypeVariant("E", 1, "Newtype", 1)) == "(Newtype)- 1"
    assert to_string_compact(TupleVariant("E", 2, "Tuple", (1, 2))) == "(Tuple)- { - 1; - 2; }"
    assert to_string_compact(StructVariant("E", 3, "Struct", {"field": 1})) == (
        "(Struct)- { field 1; }"
    )


def test_strings_use_minimal_fence() -> None:
    assert to_string_compact('say "hi"') == '- r#"say "hi""#'
    assert to_string_compact('"#') == '- r##""#"##'


def test_bytes_are_base64() -> None:
    assert to_string_compact(b"hello") == '- "aGVsbG8="'


def test_large_bytes_are_streamed_in_chunks() -> None:
    """Chunked base64 output equals the encoding of the whole payload."""
    payload: bytes = bytes(range(256)) * 40
    expected: str = base64.b64encode(payload).decode("ascii")
    assert to_string_compact(payload) == f'- "{expected}"'


def test_writer_receives_utf8_bytes() -> None:
    sink = io.BytesIO()
    to_writer(sink, "Marchán")
    assert sink.getvalue() == '- r"Marchán"'.encode()


def test_non_identifier_field_names_are_quoted() -> None:
    raw: str = drive_compact(_struct_with_field("123abc"))
    assert raw == '- { r"123abc" 1; }'


def _struct_with_field(name: str) -> Callable[[CompactFormatter, io.BytesIO], None]:
    def calls(fmt: CompactFormatter, sink: io.BytesIO) -> None:
        fmt.begin_struct(sink)
        fmt.begin_field(sink, name)
        fmt.write_i32(sink, 1)
        fmt.end_field(sink)
        fmt.end_struct(sink)

    return calls


def test_provided_annotations_are_ignored() -> None:
    def calls(fmt: CompactFormatter, sink: io.BytesIO) -> None:
        fmt.provide_type_annotation(sink, "Package")
        fmt.write_u8(sink, 7)

    assert drive_compact(calls) == "- 7"


def test_double_required_annotation() -> None:
    def calls(fmt: CompactFormatter, sink: io.BytesIO) -> None:
        fmt.require_type_annotation(sink, "Outer")
        fmt.require_type_annotation(sink, "Inner")

    with pytest.raises(ProtocolViolation):
        drive_compact(calls)


def test_second_top_level_value_has_no_field() -> None:
    """Only the first top-level value receives the placeholder name."""

    def calls(fmt: CompactFormatter, sink: io.BytesIO) -> None:
        fmt.write_bool(sink, True)
        fmt.write_bool(sink, False)

    with pytest.raises(ProtocolViolation, match="without a field name"):
        drive_compact(calls)


def test_unbalanced_groups() -> None:
    def end_without_begin(fmt: CompactFormatter, sink: io.BytesIO) -> None:
        fmt.end_struct(sink)

    def mismatched(fmt: CompactFormatter, sink: io.BytesIO) -> None:
        fmt.begin_tuple(sink)
        fmt.end_struct(sink)

    with pytest.raises(ProtocolViolation):
        drive_compact(end_without_begin)
    with pytest.raises(ProtocolViolation):
        drive_compact(mismatched)


def test_map_value_before_key() -> None:
    def calls(fmt: CompactFormatter, sink: io.BytesIO) -> None:
        fmt.begin_map(sink)
        fmt.begin_value(sink)

    with pytest.raises(ProtocolViolation):
        drive_compact(calls)


def test_map_closed_mid_entry() -> None:
    def calls(fmt: CompactFormatter, sink: io.BytesIO) -> None:
        fmt.begin_map(sink)
        fmt.begin_key(sink)
        fmt.write_string(sink, "k")
        fmt.end_key(sink)
        fmt.end_map(sink)

    with pytest.raises(ProtocolViolation):
        drive_compact(calls)


def test_raw_map_entry() -> None:
    def calls(fmt: CompactFormatter, sink: io.BytesIO) -> None:
        fmt.begin_map(sink)
        fmt.begin_key(sink)
        fmt.write_string(sink, "k")
        fmt.end_key(sink)
        fmt.begin_value(sink)
        fmt.write_f64(sink, 1.5)
        fmt.end_value(sink)
        fmt.end_map(sink)

    assert drive_compact(calls) == '- { - { key r"k"; value 1.5; }; }'
