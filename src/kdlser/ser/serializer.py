# topmark:header:start
#
#   project      : kdlser
#   file         : serializer.py
#   file_relpath : src/kdlser/ser/serializer.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Traversal adapter: turns value-shape events into formatter calls.

A `Serializer` owns one sink and one formatter for a single encoding session.
It receives one ``serialize_*`` call per value shape and applies the
representation policies of [`Options`][kdlser.config.options.Options]:

- ``None``/present optionals: ``null``/the plain value, or (``option_as_enum``)
  the unit variant ``None`` (index 0) and newtype variant ``Some`` (index 1) of
  type ``Option``;
- unit: ``null``, or (``unit_as_tuple``) an empty tuple;
- newtypes: transparent, or (``newtype_as_tuple``) a one-element tuple;
- maps: see [`MapFormat`][kdlser.config.options.MapFormat];
- enum variants: the variant name is always a mandatory type annotation.

Group shapes return scoped handles (`SerializeSeq`, `SerializeStruct`,
`SerializeMap`) that must be closed with ``end()``, or used as context managers:

```python
with serializer.serialize_struct("Package", 2) as group:
    group.serialize_field("name", "kdl")
    group.serialize_field("version", "0.0.0")
```
"""

from __future__ import annotations

import math
import struct
from typing import TYPE_CHECKING, Any, Final, Generic

from kdlser.config.logging import get_logger
from kdlser.config.options import MapFormat, Options
from kdlser.constants import INT_BOUNDS
from kdlser.errors import KdlError, KdlIOError
from kdlser.format.contract import ProtocolViolation, SinkT
from kdlser.ser import traverse

if TYPE_CHECKING:
    from types import TracebackType

    from kdlser.config.logging import KdlserLogger
    from kdlser.format.contract import BytesLike, Formatter

logger: KdlserLogger = get_logger(__name__)

OPTION_TYPE_NAME: Final[str] = "Option"
NONE_VARIANT: Final[str] = "None"
SOME_VARIANT: Final[str] = "Some"

_F32: Final[struct.Struct] = struct.Struct("<f")


class Serializer(Generic[SinkT]):
    """Adapter between value traversal and a formatter.

    Args:
        sink (SinkT): Output destination, owned by this session.
        formatter (Formatter[SinkT]): Output strategy.
        options (Options | None): Representation policies; defaults when ``None``.
    """

    def __init__(
        self,
        sink: SinkT,
        formatter: Formatter[SinkT],
        options: Options | None = None,
    ) -> None:
        self.sink: SinkT = sink
        self.formatter: Formatter[SinkT] = formatter
        self.options: Options = options if options is not None else Options()
        self._consumed = False

    def __repr__(self) -> str:
        return f"Serializer(formatter={self.formatter!r}, options={self.options!r})"

    def encode(self, value: Any) -> None:
        """Encode ``value`` into the sink. A session can encode exactly once.

        Args:
            value (Any): Value to encode.

        Raises:
            ProtocolViolation: If this session was already used.
            KdlIOError: If writing to the sink failed.
            KdlCustomError: If the value refuses to serialize.
        """
        if self._consumed:
            raise ProtocolViolation("Serializer.encode() called twice on the same session")
        self._consumed = True
        logger.debug("encoding %s with %r", type(value).__name__, self.formatter)
        try:
            self.serialize(value)
        except OSError as exc:
            logger.debug("sink write failed: %s", exc)
            raise KdlIOError() from exc
        logger.debug("encoding finished")

    def serialize(self, value: Any) -> None:
        """Serialize any supported value (re-enters the traversal dispatcher)."""
        traverse.serialize(value, self)

    # --- scalars ---

    def serialize_bool(self, value: bool) -> None:
        """Serialize a boolean."""
        self.formatter.write_bool(self.sink, value)

    def _check_int(self, kind: str, value: int) -> int:
        low, high = INT_BOUNDS[kind]
        if isinstance(value, bool) or not isinstance(value, int):
            raise KdlError.custom(f"expected an integer for {kind}, got {type(value).__name__}")
        if not low <= value <= high:
            raise KdlError.custom(f"integer {value} out of range for {kind}")
        return value

    def serialize_i8(self, value: int) -> None:
        self.formatter.write_i8(self.sink, self._check_int("i8", value))

    def serialize_i16(self, value: int) -> None:
        self.formatter.write_i16(self.sink, self._check_int("i16", value))

    def serialize_i32(self, value: int) -> None:
        self.formatter.write_i32(self.sink, self._check_int("i32", value))

    def serialize_i64(self, value: int) -> None:
        self.formatter.write_i64(self.sink, self._check_int("i64", value))

    def serialize_i128(self, value: int) -> None:
        self.formatter.write_i128(self.sink, self._check_int("i128", value))

    def serialize_u8(self, value: int) -> None:
        self.formatter.write_u8(self.sink, self._check_int("u8", value))

    def serialize_u16(self, value: int) -> None:
        self.formatter.write_u16(self.sink, self._check_int("u16", value))

    def serialize_u32(self, value: int) -> None:
        self.formatter.write_u32(self.sink, self._check_int("u32", value))

    def serialize_u64(self, value: int) -> None:
        self.formatter.write_u64(self.sink, self._check_int("u64", value))

    def serialize_u128(self, value: int) -> None:
        self.formatter.write_u128(self.sink, self._check_int("u128", value))

    def serialize_f32(self, value: float) -> None:
        """Serialize a binary32 float.

        Raises:
            KdlCustomError: If ``value`` is not finite or overflows binary32.
        """
        if not math.isfinite(value):
            raise KdlError.custom(f"KDL has no literal for non-finite float {value!r}")
        try:
            _F32.pack(value)
        except OverflowError:
            raise KdlError.custom(f"float {value!r} out of range for f32") from None
        self.formatter.write_f32(self.sink, value)

    def serialize_f64(self, value: float) -> None:
        """Serialize a binary64 float.

        Raises:
            KdlCustomError: If ``value`` is not finite.
        """
        if not math.isfinite(value):
            raise KdlError.custom(f"KDL has no literal for non-finite float {value!r}")
        self.formatter.write_f64(self.sink, float(value))

    def serialize_char(self, value: str) -> None:
        """Serialize a single character as a string.

        Raises:
            KdlCustomError: If ``value`` is not exactly one code point.
        """
        if len(value) != 1:
            raise KdlError.custom(f"expected a single character, got {value!r}")
        self.formatter.write_string(self.sink, value)

    def serialize_str(self, value: str) -> None:
        self.formatter.write_string(self.sink, value)

    def serialize_bytes(self, value: BytesLike) -> None:
        self.formatter.write_bytes(self.sink, value)

    # --- optionals, units, newtypes ---

    def serialize_none(self) -> None:
        """Serialize an absent optional."""
        if self.options.option_as_enum:
            self.serialize_unit_variant(OPTION_TYPE_NAME, 0, NONE_VARIANT)
        else:
            self.formatter.write_null(self.sink)

    def serialize_some(self, value: Any) -> None:
        """Serialize a present optional."""
        if self.options.option_as_enum:
            self.serialize_newtype_variant(OPTION_TYPE_NAME, 1, SOME_VARIANT, value)
        else:
            self.serialize(value)

    def serialize_unit(self) -> None:
        """Serialize the unit value: ``null`` or an empty tuple."""
        if self.options.unit_as_tuple:
            self.formatter.begin_tuple(self.sink)
            self.formatter.end_tuple(self.sink)
        else:
            self.formatter.write_null(self.sink)

    def serialize_unit_struct(self, name: str) -> None:
        self.formatter.provide_type_annotation(self.sink, name)
        self.serialize_unit()

    def serialize_unit_variant(self, name: str, index: int, variant: str) -> None:
        self.formatter.require_type_annotation(self.sink, variant)
        self.serialize_unit()

    def serialize_newtype_struct(self, name: str, value: Any) -> None:
        """Serialize a single-value wrapper, transparently or as a 1-tuple."""
        if self.options.newtype_as_tuple:
            with self.serialize_tuple_struct(name, 1) as group:
                group.serialize_element(value)
        else:
            self.formatter.provide_type_annotation(self.sink, name)
            self.serialize(value)

    def serialize_newtype_variant(self, name: str, index: int, variant: str, value: Any) -> None:
        """Serialize a single-value variant, transparently or as a 1-tuple.

        In the transparent form the variant annotation attaches to the wrapped
        value, so that value must not be a variant itself.
        """
        if self.options.newtype_as_tuple:
            with self.serialize_tuple_variant(name, index, variant, 1) as group:
                group.serialize_element(value)
        else:
            self.formatter.require_type_annotation(self.sink, variant)
            self.serialize(value)

    # --- sequences and tuples ---

    def serialize_seq(self, length: int | None = None) -> SerializeSeq[SinkT]:
        """Open a sequence; ``length`` is informational."""
        self.formatter.begin_tuple(self.sink)
        return SerializeSeq(self)

    def serialize_tuple(self, length: int) -> SerializeSeq[SinkT]:
        return self.serialize_seq(length)

    def serialize_tuple_struct(self, name: str, length: int) -> SerializeSeq[SinkT]:
        self.formatter.provide_type_annotation(self.sink, name)
        return self.serialize_seq(length)

    def serialize_tuple_variant(
        self, name: str, index: int, variant: str, length: int
    ) -> SerializeSeq[SinkT]:
        self.formatter.require_type_annotation(self.sink, variant)
        return self.serialize_seq(length)

    # --- structs ---

    def serialize_struct(self, name: str, length: int) -> SerializeStruct[SinkT]:
        self.formatter.provide_type_annotation(self.sink, name)
        self.formatter.begin_struct(self.sink)
        return SerializeStruct(self)

    def serialize_struct_variant(
        self, name: str, index: int, variant: str, length: int
    ) -> SerializeStruct[SinkT]:
        self.formatter.require_type_annotation(self.sink, variant)
        self.formatter.begin_struct(self.sink)
        return SerializeStruct(self)

    # --- maps ---

    def serialize_map(self, length: int | None = None) -> SerializeMap[SinkT]:
        """Open a map in the configured `MapFormat`."""
        map_format: MapFormat = self.options.map_format
        if map_format is MapFormat.INFER:
            self.formatter.begin_map(self.sink)
        elif map_format is MapFormat.TUPLE:
            self.formatter.begin_tuple(self.sink)
        else:
            self.formatter.begin_struct(self.sink)
        return SerializeMap(self, map_format)


class _Group(Generic[SinkT]):
    """Common lifecycle of a scoped group handle."""

    def __init__(self, serializer: Serializer[SinkT]) -> None:
        self._ser: Serializer[SinkT] = serializer
        self._closed = False

    def __enter__(self) -> _Group[SinkT]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        # A failed session is abandoned: closing the group would only add output.
        if exc_type is None and not self._closed:
            self.end()

    def _check_open(self, call: str) -> None:
        if self._closed:
            raise ProtocolViolation(f"{call} called on a group that was already ended")

    def end(self) -> None:
        """Close the group.

        Raises:
            ProtocolViolation: If the group was already ended.
        """
        self._check_open("end")
        self._closed = True
        self._close()

    def _close(self) -> None:
        raise NotImplementedError


class SerializeSeq(_Group[SinkT]):
    """Handle for sequences, tuples, tuple structs and tuple variants."""

    def __enter__(self) -> SerializeSeq[SinkT]:
        return self

    def serialize_element(self, value: Any) -> None:
        """Serialize the next positional element."""
        self._check_open("serialize_element")
        ser: Serializer[SinkT] = self._ser
        ser.formatter.begin_element(ser.sink)
        ser.serialize(value)
        ser.formatter.end_element(ser.sink)

    def _close(self) -> None:
        self._ser.formatter.end_tuple(self._ser.sink)


class SerializeStruct(_Group[SinkT]):
    """Handle for structs and struct variants."""

    def __enter__(self) -> SerializeStruct[SinkT]:
        return self

    def serialize_field(self, key: str, value: Any) -> None:
        """Serialize the field ``key``."""
        self._check_open("serialize_field")
        ser: Serializer[SinkT] = self._ser
        ser.formatter.begin_field(ser.sink, key)
        ser.serialize(value)
        ser.formatter.end_field(ser.sink)

    def skip_field(self, key: str) -> None:
        """Record that field ``key`` is omitted; nothing is written."""
        self._check_open("skip_field")
        logger.trace("skipping field %r", key)

    def _close(self) -> None:
        self._ser.formatter.end_struct(self._ser.sink)


class SerializeMap(_Group[SinkT]):
    """Handle for maps.

    Keys and values alternate strictly: every ``serialize_key`` is followed by
    exactly one ``serialize_value`` before the next key or ``end()``.
    """

    def __init__(self, serializer: Serializer[SinkT], map_format: MapFormat) -> None:
        super().__init__(serializer)
        self._format: MapFormat = map_format
        self._awaiting_value = False

    def __enter__(self) -> SerializeMap[SinkT]:
        return self

    def serialize_key(self, key: Any) -> None:
        """Serialize the key of the next entry.

        Raises:
            ProtocolViolation: If the previous key still has no value.
        """
        self._check_open("serialize_key")
        if self._awaiting_value:
            raise ProtocolViolation("serialize_key called before the previous value")
        ser: Serializer[SinkT] = self._ser
        fmt: Formatter[SinkT] = ser.formatter
        if self._format is MapFormat.INFER:
            fmt.begin_key(ser.sink)
            ser.serialize(key)
            fmt.end_key(ser.sink)
        elif self._format is MapFormat.TUPLE:
            fmt.begin_element(ser.sink)
            fmt.begin_tuple(ser.sink)
            fmt.begin_element(ser.sink)
            ser.serialize(key)
            fmt.end_element(ser.sink)
        else:
            fmt.begin_field(ser.sink, "key")
            ser.serialize(key)
            fmt.end_field(ser.sink)
        self._awaiting_value = True

    def serialize_value(self, value: Any) -> None:
        """Serialize the value of the current entry.

        Raises:
            ProtocolViolation: If no key was serialized for this entry.
        """
        self._check_open("serialize_value")
        if not self._awaiting_value:
            raise ProtocolViolation("serialize_value called without a preceding key")
        ser: Serializer[SinkT] = self._ser
        fmt: Formatter[SinkT] = ser.formatter
        if self._format is MapFormat.INFER:
            fmt.begin_value(ser.sink)
            ser.serialize(value)
            fmt.end_value(ser.sink)
        elif self._format is MapFormat.TUPLE:
            fmt.begin_element(ser.sink)
            ser.serialize(value)
            fmt.end_element(ser.sink)
            fmt.end_tuple(ser.sink)
            fmt.end_element(ser.sink)
        else:
            fmt.begin_field(ser.sink, "value")
            ser.serialize(value)
            fmt.end_field(ser.sink)
        self._awaiting_value = False

    def serialize_entry(self, key: Any, value: Any) -> None:
        """Serialize a whole entry."""
        self.serialize_key(key)
        self.serialize_value(value)

    def _close(self) -> None:
        if self._awaiting_value:
            raise ProtocolViolation("map ended between a key and its value")
        fmt: Formatter[SinkT] = self._ser.formatter
        if self._format is MapFormat.INFER:
            fmt.end_map(self._ser.sink)
        elif self._format is MapFormat.TUPLE:
            fmt.end_tuple(self._ser.sink)
        else:
            fmt.end_struct(self._ser.sink)
