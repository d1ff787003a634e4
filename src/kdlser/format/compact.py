# topmark:header:start
#
#   project      : kdlser
#   file         : compact.py
#   file_relpath : src/kdlser/format/compact.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Single-pass KDL formatter writing to any byte stream.

`CompactFormatter` writes every token as soon as it is known. The only state it
keeps is the pending annotation/field pair and the stack of open groups (for
protocol checks). The output is valid but dense KDL:

```kdl
- { name r"kdl"; tags { - r"a"; - r"b"; }; }
```

Rules:
- every value is preceded by ``(annotation)`` (if one is pending) and its field name;
- groups are written as ``{ `` ... ``}``; every field is terminated by ``; ``;
- strings are raw strings with the minimal hash fence;
- bytes are base64-encoded in a plain string, streamed in chunks straight into
  the sink.
"""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Final, Protocol

from kdlser.config.logging import get_logger
from kdlser.constants import PLACEHOLDER_NAME
from kdlser.format.contract import (
    GroupKind,
    GroupTracker,
    MapPhase,
    PendingValue,
)
from kdlser.lexical import (
    format_annotation,
    format_bool,
    format_float,
    format_name,
    quote_raw,
)

if TYPE_CHECKING:
    from kdlser.config.logging import KdlserLogger
    from kdlser.format.contract import BytesLike

logger: KdlserLogger = get_logger(__name__)

# Input bytes per base64 chunk; a multiple of 3 so no padding appears mid-stream.
_BASE64_CHUNK: Final[int] = 3 * 1024


class ByteSink(Protocol):
    """Sequential byte destination (file, socket stream, `io.BytesIO`, ...)."""

    def write(self, data: bytes, /) -> object:
        """Write ``data``; raise `OSError` on failure."""
        ...


class CompactFormatter:
    """Formatter producing single-line KDL, streamed to a byte sink."""

    def __init__(self) -> None:
        # Top-level values have no enclosing field: they use the placeholder name.
        self._pending = PendingValue(field=PLACEHOLDER_NAME)
        self._groups = GroupTracker()

    def __repr__(self) -> str:
        return f"CompactFormatter(pending={self._pending.state.value}, depth={self._groups.depth})"

    def _write(self, sink: ByteSink, text: str) -> None:
        sink.write(text.encode("utf-8"))

    def _write_pre_value(self, sink: ByteSink) -> None:
        annotation, name = self._pending.take()
        self._write(sink, f"{format_annotation(annotation)}{format_name(name)} ")

    def _write_scalar(self, sink: ByteSink, text: str) -> None:
        self._write_pre_value(sink)
        self._write(sink, text)

    def _open(self, sink: ByteSink) -> None:
        self._write_pre_value(sink)
        self._write(sink, "{ ")

    # --- annotations ---

    def provide_type_annotation(self, sink: ByteSink, name: str) -> None:
        """Ignore informational type names."""

    def require_type_annotation(self, sink: ByteSink, name: str) -> None:
        """Attach ``name`` as annotation of the next value."""
        self._pending.require_annotation(name)

    # --- scalars ---

    def write_bool(self, sink: ByteSink, value: bool) -> None:
        """Write a boolean literal."""
        self._write_scalar(sink, format_bool(value))

    def write_integer(self, sink: ByteSink, value: int) -> None:
        """Write an integer literal (range already checked by the caller)."""
        self._write_scalar(sink, str(value))

    write_i8 = write_i16 = write_i32 = write_i64 = write_i128 = write_integer
    write_u8 = write_u16 = write_u32 = write_u64 = write_u128 = write_integer

    def write_f32(self, sink: ByteSink, value: float) -> None:
        """Write a binary32 float in its shortest round-trip form."""
        self._write_scalar(sink, format_float(value, single=True))

    def write_f64(self, sink: ByteSink, value: float) -> None:
        """Write a binary64 float."""
        self._write_scalar(sink, format_float(value))

    def write_null(self, sink: ByteSink) -> None:
        """Write ``null``."""
        self._write_scalar(sink, "null")

    def write_string(self, sink: ByteSink, value: str) -> None:
        """Write a raw string."""
        self._write_scalar(sink, quote_raw(value))

    def write_bytes(self, sink: ByteSink, value: BytesLike) -> None:
        """Stream ``value`` as base64 inside a plain string."""
        self._write_pre_value(sink)
        sink.write(b'"')
        view: memoryview = memoryview(value)
        if not view.c_contiguous:
            view = memoryview(view.tobytes())
        view = view.cast("B")
        for start in range(0, len(view), _BASE64_CHUNK):
            sink.write(base64.b64encode(view[start : start + _BASE64_CHUNK]))
        sink.write(b'"')

    # --- tuples ---

    def begin_tuple(self, sink: ByteSink) -> None:
        """Open a positional group."""
        self._open(sink)
        self._groups.open(GroupKind.TUPLE)

    def begin_element(self, sink: ByteSink) -> None:
        """Name the next element with the placeholder."""
        self._pending.set_field(PLACEHOLDER_NAME)

    def end_element(self, sink: ByteSink) -> None:
        """Terminate the element."""
        self._write(sink, "; ")

    def end_tuple(self, sink: ByteSink) -> None:
        """Close a positional group."""
        self._groups.close(GroupKind.TUPLE)
        self._write(sink, "}")

    # --- structs ---

    def begin_struct(self, sink: ByteSink) -> None:
        """Open a named-field group."""
        self._open(sink)
        self._groups.open(GroupKind.STRUCT)

    def begin_field(self, sink: ByteSink, name: str) -> None:
        """Name the next value."""
        self._pending.set_field(name)

    def end_field(self, sink: ByteSink) -> None:
        """Terminate the field."""
        self._write(sink, "; ")

    def end_struct(self, sink: ByteSink) -> None:
        """Close a named-field group."""
        self._groups.close(GroupKind.STRUCT)
        self._write(sink, "}")

    # --- maps: ``- { key K; value V; }; `` per entry ---

    def begin_map(self, sink: ByteSink) -> None:
        """Open a map group."""
        self._open(sink)
        self._groups.open(GroupKind.MAP)

    def begin_key(self, sink: ByteSink) -> None:
        """Open an entry node and name its key field."""
        self._groups.advance_map(MapPhase.EXPECT_KEY, MapPhase.IN_KEY, "begin_key")
        self._pending.set_field(PLACEHOLDER_NAME)
        self._open(sink)
        self._pending.set_field("key")

    def end_key(self, sink: ByteSink) -> None:
        """Terminate the key field."""
        self._groups.advance_map(MapPhase.IN_KEY, MapPhase.EXPECT_VALUE, "end_key")
        self._write(sink, "; ")

    def begin_value(self, sink: ByteSink) -> None:
        """Name the value field."""
        self._groups.advance_map(MapPhase.EXPECT_VALUE, MapPhase.IN_VALUE, "begin_value")
        self._pending.set_field("value")

    def end_value(self, sink: ByteSink) -> None:
        """Terminate the value field and close the entry node."""
        self._groups.advance_map(MapPhase.IN_VALUE, MapPhase.EXPECT_KEY, "end_value")
        self._write(sink, "; }; ")

    def end_map(self, sink: ByteSink) -> None:
        """Close a map group."""
        self._groups.close(GroupKind.MAP)
        self._write(sink, "}")
