# topmark:header:start
#
#   project      : kdlser
#   file         : human.py
#   file_relpath : src/kdlser/format/human.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Indentation-aware KDL formatter writing to an in-memory text buffer.

`HumanFormatter` lays out one node per line and nests child blocks with four
spaces per level:

```kdl
package name=r"kdl" version=r"0.0.0" {
    authors r"Kat Marchán <kzm@zkat.tech>"
    license-file r"LICENSE.md"
}
dependencies {
    - key=r"nom" value=r"6.0.1"
}
```

Layout rules:

- The first group of the document, when no type annotation is pending, is the
  implicit root: it writes no node and no braces; its fields become root-level
  nodes. A type-annotated root (or ``wrap_root=True``) is written as a real node.
- A group becomes a node: ``(annotation)name`` on a new line at the current
  indentation.
- With ``inline_scalars=True`` (default), scalar fields stay on the node line as
  ``name=value`` properties (or positional ``value`` arguments for placeholder
  names). The child block ``{`` opens when the first nested group arrives; from
  then on every field is a child node on its own line.
- With ``inline_scalars=False``, every group opens its block immediately.
- Closing a node with an open block writes ``}`` aligned with the node; closing
  the implicit root writes the final newline.

Indentation is clamped at `MAX_INDENT` columns; braces stay balanced beyond it.
The layout depends on the nesting state, which is why this formatter only writes
to an in-memory buffer (`io.StringIO`).
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import TYPE_CHECKING

from kdlser.config.logging import get_logger
from kdlser.constants import INDENT_STEP, MAX_INDENT, PLACEHOLDER_NAME
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
    import io

    from kdlser.config.logging import KdlserLogger
    from kdlser.format.contract import BytesLike

logger: KdlserLogger = get_logger(__name__)


@dataclass
class _Node:
    """An open group in the layout.

    Attributes:
        implicit (bool): True for the elided document root.
        block_open (bool): True once ``{`` has been written for this node.
    """

    implicit: bool = False
    block_open: bool = False


class HumanFormatter:
    """Formatter producing indented, human-friendly KDL.

    Args:
        wrap_root (bool): Always write the document root as a node, even when it
            could be elided.
        inline_scalars (bool): Keep scalar fields on their node's line until the
            first nested group.
    """

    def __init__(self, *, wrap_root: bool = False, inline_scalars: bool = True) -> None:
        self._wrap_root = wrap_root
        self._inline_scalars = inline_scalars
        self._root = True
        self._frames: list[_Node] = []
        self._pending = PendingValue(field=PLACEHOLDER_NAME)
        self._groups = GroupTracker()

    def __repr__(self) -> str:
        return (
            f"HumanFormatter(root={self._root}, frames={len(self._frames)}, "
            f"pending={self._pending.state.value})"
        )

    # --- layout helpers ---

    def _indent(self) -> str:
        nodes: int = sum(1 for frame in self._frames if not frame.implicit)
        return " " * min(nodes * INDENT_STEP, MAX_INDENT)

    def _on_node_line(self) -> bool:
        """Return True if the next value belongs on the innermost node's line."""
        if not self._frames:
            return False
        top: _Node = self._frames[-1]
        return not top.implicit and not top.block_open

    def _open_block(self, sink: io.StringIO, node: _Node) -> None:
        sink.write(" {")
        node.block_open = True

    def _start_child(self, sink: io.StringIO, annotation: str | None, name: str) -> None:
        if self._on_node_line():
            self._open_block(sink, self._frames[-1])
        prefix: str = f"\n{self._indent()}" if self._frames else ""
        sink.write(f"{prefix}{format_annotation(annotation)}{format_name(name)}")

    def _write_scalar(self, sink: io.StringIO, text: str) -> None:
        annotation, name = self._pending.take()
        if self._on_node_line():
            if name == PLACEHOLDER_NAME:
                sink.write(f" {format_annotation(annotation)}{text}")
            else:
                sink.write(f" {format_name(name)}={format_annotation(annotation)}{text}")
            return
        self._start_child(sink, annotation, name)
        sink.write(f" {text}")

    def _push_node(self, sink: io.StringIO) -> None:
        if self._root:
            self._root = False
            if self._pending.annotation is None and not self._wrap_root:
                self._pending.discard_field()
                self._frames.append(_Node(implicit=True))
                logger.trace("eliding document root")
                return
        annotation, name = self._pending.take()
        self._start_child(sink, annotation, name)
        node = _Node()
        self._frames.append(node)
        if not self._inline_scalars:
            self._open_block(sink, node)
        logger.trace("opened node %r at depth %d", name, len(self._frames))

    def _pop_node(self, sink: io.StringIO) -> None:
        node: _Node = self._frames.pop()
        if node.implicit:
            sink.write("\n")
        elif node.block_open:
            sink.write(f"\n{self._indent()}}}")

    def _begin_group(self, sink: io.StringIO, kind: GroupKind) -> None:
        self._push_node(sink)
        self._groups.open(kind)

    def _end_group(self, sink: io.StringIO, kind: GroupKind) -> None:
        self._groups.close(kind)
        self._pop_node(sink)

    # --- annotations ---

    def provide_type_annotation(self, sink: io.StringIO, name: str) -> None:
        """Ignore informational type names."""

    def require_type_annotation(self, sink: io.StringIO, name: str) -> None:
        """Attach ``name`` as annotation of the next value."""
        self._pending.require_annotation(name)

    # --- scalars ---

    def write_bool(self, sink: io.StringIO, value: bool) -> None:
        """Write a boolean literal."""
        self._write_scalar(sink, format_bool(value))

    def write_integer(self, sink: io.StringIO, value: int) -> None:
        """Write an integer literal (range already checked by the caller)."""
        self._write_scalar(sink, str(value))

    write_i8 = write_i16 = write_i32 = write_i64 = write_i128 = write_integer
    write_u8 = write_u16 = write_u32 = write_u64 = write_u128 = write_integer

    def write_f32(self, sink: io.StringIO, value: float) -> None:
        """Write a binary32 float in its shortest round-trip form."""
        self._write_scalar(sink, format_float(value, single=True))

    def write_f64(self, sink: io.StringIO, value: float) -> None:
        """Write a binary64 float."""
        self._write_scalar(sink, format_float(value))

    def write_null(self, sink: io.StringIO) -> None:
        """Write ``null``."""
        self._write_scalar(sink, "null")

    def write_string(self, sink: io.StringIO, value: str) -> None:
        """Write a raw string."""
        self._write_scalar(sink, quote_raw(value))

    def write_bytes(self, sink: io.StringIO, value: BytesLike) -> None:
        """Write ``value`` as base64 inside a plain string."""
        view: memoryview = memoryview(value)
        data: bytes | memoryview = view if view.c_contiguous else view.tobytes()
        encoded: str = base64.b64encode(data).decode("ascii")
        self._write_scalar(sink, f'"{encoded}"')

    # --- tuples ---

    def begin_tuple(self, sink: io.StringIO) -> None:
        """Open a positional group."""
        self._begin_group(sink, GroupKind.TUPLE)

    def begin_element(self, sink: io.StringIO) -> None:
        """Name the next element with the placeholder."""
        self._pending.set_field(PLACEHOLDER_NAME)

    def end_element(self, sink: io.StringIO) -> None:
        """Nothing to terminate: the next field starts on its own."""

    def end_tuple(self, sink: io.StringIO) -> None:
        """Close a positional group."""
        self._end_group(sink, GroupKind.TUPLE)

    # --- structs ---

    def begin_struct(self, sink: io.StringIO) -> None:
        """Open a named-field group."""
        self._begin_group(sink, GroupKind.STRUCT)

    def begin_field(self, sink: io.StringIO, name: str) -> None:
        """Name the next value."""
        self._pending.set_field(name)

    def end_field(self, sink: io.StringIO) -> None:
        """Nothing to terminate: the next field starts on its own."""

    def end_struct(self, sink: io.StringIO) -> None:
        """Close a named-field group."""
        self._end_group(sink, GroupKind.STRUCT)

    # --- maps: one ``- key=K value=V`` node per entry ---

    def begin_map(self, sink: io.StringIO) -> None:
        """Open a map group."""
        self._begin_group(sink, GroupKind.MAP)

    def begin_key(self, sink: io.StringIO) -> None:
        """Open an entry node and name its key field."""
        self._groups.advance_map(MapPhase.EXPECT_KEY, MapPhase.IN_KEY, "begin_key")
        self._pending.set_field(PLACEHOLDER_NAME)
        self._push_node(sink)
        self._pending.set_field("key")

    def end_key(self, sink: io.StringIO) -> None:
        """Finish the key field."""
        self._groups.advance_map(MapPhase.IN_KEY, MapPhase.EXPECT_VALUE, "end_key")

    def begin_value(self, sink: io.StringIO) -> None:
        """Name the value field."""
        self._groups.advance_map(MapPhase.EXPECT_VALUE, MapPhase.IN_VALUE, "begin_value")
        self._pending.set_field("value")

    def end_value(self, sink: io.StringIO) -> None:
        """Finish the value field and close the entry node."""
        self._groups.advance_map(MapPhase.IN_VALUE, MapPhase.EXPECT_KEY, "end_value")
        self._pop_node(sink)

    def end_map(self, sink: io.StringIO) -> None:
        """Close a map group."""
        self._end_group(sink, GroupKind.MAP)
