# topmark:header:start
#
#   project      : kdlser
#   file         : contract.py
#   file_relpath : src/kdlser/format/contract.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Formatter contract shared by all KDL output strategies.

The traversal adapter ([`Serializer`][kdlser.ser.serializer.Serializer]) drives a
formatter through a flat set of calls. Every call receives the sink first, writes
(or defers) text, and either returns or raises `OSError`:

- type annotations: `provide_type_annotation` (informational, may be ignored) and
  `require_type_annotation` (must be rendered on the next value);
- scalars: `write_bool`, `write_i8` ... `write_u128`, `write_f32`, `write_f64`,
  `write_null`, `write_string`, `write_bytes`;
- groups: `begin_tuple`/`begin_element`/`end_element`/`end_tuple`,
  `begin_struct`/`begin_field`/`end_field`/`end_struct`,
  `begin_map`/`begin_key`/`end_key`/`begin_value`/`end_value`/`end_map`.

Groups nest with strict stack discipline. Violations of the contract raise
`ProtocolViolation`; they signal a bug in the calling traversal and are kept out
of the [`kdlser.errors`][kdlser.errors] taxonomy.

This module also provides the bookkeeping both formatters share:

- `PendingValue`: the pending annotation/field slots and their state machine;
- `GroupTracker`: the stack of open groups and the key/value phase of open maps.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, TypeVar, Union

SinkT = TypeVar("SinkT", contravariant=True)

# Byte sequences accepted by `write_bytes`.
BytesLike = Union[bytes, bytearray, memoryview]


class ProtocolViolation(AssertionError):
    """The formatter protocol was driven out of order.

    Raised for a second mandatory type annotation before the first is consumed,
    a value written without a field name, mismatched `begin_*`/`end_*` calls, or
    a map key/value written out of turn. Never caused by the data being encoded.
    """


class PendingState(Enum):
    """What is waiting to be attached to the next written value."""

    NONE = "none"
    TYPE = "type"
    FIELD = "field"
    BOTH = "both"


@dataclass
class PendingValue:
    """Pending type annotation and field name for the next value.

    Attributes:
        annotation (str | None): Mandatory type annotation, consumed by exactly the
            next value.
        field (str | None): Field or node name the next value is attached to.
    """

    annotation: str | None = None
    field: str | None = None

    @property
    def state(self) -> PendingState:
        """Return the current state of the pending slots."""
        if self.annotation is None:
            return PendingState.NONE if self.field is None else PendingState.FIELD
        return PendingState.TYPE if self.field is None else PendingState.BOTH

    def require_annotation(self, name: str) -> None:
        """Set the mandatory annotation for the next value.

        Raises:
            ProtocolViolation: If an annotation is already pending.
        """
        if self.annotation is not None:
            raise ProtocolViolation(
                f"Type annotation {name!r} provided while {self.annotation!r} is still pending"
            )
        self.annotation = name

    def set_field(self, name: str) -> None:
        """Set the field name for the next value (replacing any unused one)."""
        self.field = name

    def take(self) -> tuple[str | None, str]:
        """Consume both slots for the value being written.

        Returns:
            tuple[str | None, str]: The annotation (if any) and the field name.

        Raises:
            ProtocolViolation: If no field name is pending.
        """
        annotation, name = self.annotation, self.field
        if name is None:
            raise ProtocolViolation("Value written without a field name")
        self.annotation = None
        self.field = None
        return annotation, name

    def discard_field(self) -> str | None:
        """Drop the pending field name (used when a group is elided)."""
        name, self.field = self.field, None
        return name


class GroupKind(Enum):
    """Kind of an open group."""

    TUPLE = "tuple"
    STRUCT = "struct"
    MAP = "map"


class MapPhase(Enum):
    """Position inside the current entry of an open map."""

    EXPECT_KEY = "expect_key"
    IN_KEY = "in_key"
    EXPECT_VALUE = "expect_value"
    IN_VALUE = "in_value"


class GroupTracker:
    """Stack of open groups, checking that `begin_*`/`end_*` calls pair up."""

    def __init__(self) -> None:
        self._kinds: list[GroupKind] = []
        self._map_phases: list[MapPhase] = []

    @property
    def depth(self) -> int:
        """Return the number of open groups."""
        return len(self._kinds)

    def open(self, kind: GroupKind) -> None:
        """Push a group of ``kind``."""
        self._kinds.append(kind)
        if kind is GroupKind.MAP:
            self._map_phases.append(MapPhase.EXPECT_KEY)

    def close(self, kind: GroupKind) -> None:
        """Pop a group of ``kind``.

        Raises:
            ProtocolViolation: If no group is open, the innermost group has another
                kind, or a map is closed in the middle of an entry.
        """
        if not self._kinds:
            raise ProtocolViolation(f"end_{kind.value} called with no open group")
        current: GroupKind = self._kinds[-1]
        if current is not kind:
            raise ProtocolViolation(f"end_{kind.value} called while a {current.value} is open")
        if kind is GroupKind.MAP:
            phase: MapPhase = self._map_phases[-1]
            if phase is not MapPhase.EXPECT_KEY:
                raise ProtocolViolation(f"end_map called in map phase {phase.value}")
            self._map_phases.pop()
        self._kinds.pop()

    def advance_map(self, expected: MapPhase, following: MapPhase, call: str) -> None:
        """Move the innermost map from ``expected`` to ``following``.

        Raises:
            ProtocolViolation: If no map is innermost or it is in another phase.
        """
        if not self._kinds or self._kinds[-1] is not GroupKind.MAP:
            raise ProtocolViolation(f"{call} called outside of a map")
        phase: MapPhase = self._map_phases[-1]
        if phase is not expected:
            raise ProtocolViolation(
                f"{call} called in map phase {phase.value} (expected {expected.value})"
            )
        self._map_phases[-1] = following


class Formatter(Protocol[SinkT]):
    """Write operations every KDL output strategy implements.

    ``SinkT`` is the sink type: a byte stream for the compact formatter, an
    in-memory text buffer for the human formatter.
    """

    def provide_type_annotation(self, sink: SinkT, name: str) -> None:
        """Offer an informational type name (struct names); may be ignored."""
        ...

    def require_type_annotation(self, sink: SinkT, name: str) -> None:
        """Attach a mandatory type annotation (variant names) to the next value."""
        ...

    def write_bool(self, sink: SinkT, value: bool) -> None: ...

    def write_i8(self, sink: SinkT, value: int) -> None: ...

    def write_i16(self, sink: SinkT, value: int) -> None: ...

    def write_i32(self, sink: SinkT, value: int) -> None: ...

    def write_i64(self, sink: SinkT, value: int) -> None: ...

    def write_i128(self, sink: SinkT, value: int) -> None: ...

    def write_u8(self, sink: SinkT, value: int) -> None: ...

    def write_u16(self, sink: SinkT, value: int) -> None: ...

    def write_u32(self, sink: SinkT, value: int) -> None: ...

    def write_u64(self, sink: SinkT, value: int) -> None: ...

    def write_u128(self, sink: SinkT, value: int) -> None: ...

    def write_f32(self, sink: SinkT, value: float) -> None: ...

    def write_f64(self, sink: SinkT, value: float) -> None: ...

    def write_null(self, sink: SinkT) -> None: ...

    def write_string(self, sink: SinkT, value: str) -> None: ...

    def write_bytes(self, sink: SinkT, value: BytesLike) -> None:
        """Write bytes as a base64 string."""
        ...

    def begin_tuple(self, sink: SinkT) -> None: ...

    def begin_element(self, sink: SinkT) -> None: ...

    def end_element(self, sink: SinkT) -> None: ...

    def end_tuple(self, sink: SinkT) -> None: ...

    def begin_struct(self, sink: SinkT) -> None: ...

    def begin_field(self, sink: SinkT, name: str) -> None: ...

    def end_field(self, sink: SinkT) -> None: ...

    def end_struct(self, sink: SinkT) -> None: ...

    def begin_map(self, sink: SinkT) -> None: ...

    def begin_key(self, sink: SinkT) -> None: ...

    def end_key(self, sink: SinkT) -> None: ...

    def begin_value(self, sink: SinkT) -> None: ...

    def end_value(self, sink: SinkT) -> None: ...

    def end_map(self, sink: SinkT) -> None: ...
