# topmark:header:start
#
#   project      : kdlser
#   file         : options.py
#   file_relpath : src/kdlser/config/options.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Representation options for one encoding session.

Design:
    * ``MutableOptions`` uses tri-state fields (``None`` = unset) so several
      sources can be merged last-wins (defaults → config file → CLI).
    * ``Options`` is the fully-resolved, immutable view handed to a serializer.
      It is read-only for the whole session.
    * ``MutableOptions.resolve(base)`` fills unset fields from ``base`` and returns
      a frozen ``Options``.

TOML mapping (``kdlser.toml``, or ``[tool.kdlser]`` in ``pyproject.toml``):

    option_as_enum = false
    unit_as_tuple = false
    newtype_as_tuple = false
    map_format = "infer"      # "infer" | "tuple" | "struct"
    wrap_root = false
    inline_scalars = true
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from kdlser.config.keys import Toml

if TYPE_CHECKING:
    from collections.abc import Mapping


class MapFormat(str, Enum):
    """How map entries are represented.

    Attributes:
        INFER: One placeholder node per entry, holding ``key`` and ``value`` fields.
        TUPLE: One two-element positional tuple ``(key, value)`` per entry.
        STRUCT: ``key`` and ``value`` fields written directly in the map's node.
    """

    INFER = "infer"
    TUPLE = "tuple"
    STRUCT = "struct"

    @classmethod
    def parse(cls, value: str) -> MapFormat:
        """Parse a (case-insensitive) map format name.

        Raises:
            ValueError: If ``value`` names no map format.
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices: str = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown map format {value!r} - valid choices: {choices}") from None


@dataclass(frozen=True, slots=True)
class Options:
    """Immutable representation policies used by the serializer.

    Attributes:
        option_as_enum (bool): Encode absent/present optionals as the unit variant
            ``None`` / newtype variant ``Some`` of type ``Option`` instead of
            ``null`` / the plain value.
        unit_as_tuple (bool): Encode unit as an empty tuple instead of ``null``.
        newtype_as_tuple (bool): Encode newtypes as one-element tuples instead of
            transparently.
        map_format (MapFormat): Map entry representation.
        wrap_root (bool): Always write the document root as a node in human output.
        inline_scalars (bool): Human output keeps scalar fields on their node line.
    """

    option_as_enum: bool = False
    unit_as_tuple: bool = False
    newtype_as_tuple: bool = False
    map_format: MapFormat = MapFormat.INFER
    wrap_root: bool = False
    inline_scalars: bool = True


@dataclass
class MutableOptions:
    """Mutable builder for `Options`, suitable for config loading/merging.

    Every attribute mirrors `Options`; `None` means "inherit".
    """

    option_as_enum: bool | None = None
    unit_as_tuple: bool | None = None
    newtype_as_tuple: bool | None = None
    map_format: MapFormat | None = None
    wrap_root: bool | None = None
    inline_scalars: bool | None = None

    def merge_with(self, other: MutableOptions) -> MutableOptions:
        """Return new options applying ``other`` over ``self`` (last-wins).

        ``None`` fields in ``other`` do not override explicit values in ``self``.

        Args:
            other (MutableOptions): The options whose values override current ones.

        Returns:
            MutableOptions: Merged options.
        """

        def pick(current: Any, override: Any) -> Any:
            return override if override is not None else current

        return MutableOptions(
            option_as_enum=pick(self.option_as_enum, other.option_as_enum),
            unit_as_tuple=pick(self.unit_as_tuple, other.unit_as_tuple),
            newtype_as_tuple=pick(self.newtype_as_tuple, other.newtype_as_tuple),
            map_format=pick(self.map_format, other.map_format),
            wrap_root=pick(self.wrap_root, other.wrap_root),
            inline_scalars=pick(self.inline_scalars, other.inline_scalars),
        )

    def resolve(self, base: Options) -> Options:
        """Resolve unset fields against ``base``.

        Args:
            base (Options): Options providing values for unset fields.

        Returns:
            Options: Fully-resolved immutable options.
        """
        return Options(
            option_as_enum=(
                base.option_as_enum if self.option_as_enum is None else self.option_as_enum
            ),
            unit_as_tuple=base.unit_as_tuple if self.unit_as_tuple is None else self.unit_as_tuple,
            newtype_as_tuple=(
                base.newtype_as_tuple if self.newtype_as_tuple is None else self.newtype_as_tuple
            ),
            map_format=base.map_format if self.map_format is None else self.map_format,
            wrap_root=base.wrap_root if self.wrap_root is None else self.wrap_root,
            inline_scalars=(
                base.inline_scalars if self.inline_scalars is None else self.inline_scalars
            ),
        )

    def freeze(self) -> Options:
        """Freeze to concrete `Options`, using the defaults for unset fields."""
        return self.resolve(Options())

    @classmethod
    def from_toml_table(cls, tbl: Mapping[str, Any] | None) -> MutableOptions:
        """Create options from a TOML table mapping.

        Unspecified keys become ``None``.

        Args:
            tbl (Mapping[str, Any] | None): Table with keys matching the attributes.

        Returns:
            MutableOptions: Parsed options.

        Raises:
            ValueError: If a key is unknown or a value has the wrong type.
        """
        if not tbl:
            return cls()

        unknown: list[str] = sorted(set(tbl) - Toml.ALL_KEYS)
        if unknown:
            raise ValueError(f"Unknown option(s): {', '.join(unknown)}")

        def pick_bool(key: str) -> bool | None:
            if key not in tbl:
                return None
            value: Any = tbl[key]
            if not isinstance(value, bool):
                raise ValueError(f"Option {key!r} must be a boolean, got {value!r}")
            return value

        map_format: MapFormat | None = None
        if Toml.KEY_MAP_FORMAT in tbl:
            raw: Any = tbl[Toml.KEY_MAP_FORMAT]
            if not isinstance(raw, str):
                raise ValueError(f"Option {Toml.KEY_MAP_FORMAT!r} must be a string, got {raw!r}")
            map_format = MapFormat.parse(raw)

        return cls(
            option_as_enum=pick_bool(Toml.KEY_OPTION_AS_ENUM),
            unit_as_tuple=pick_bool(Toml.KEY_UNIT_AS_TUPLE),
            newtype_as_tuple=pick_bool(Toml.KEY_NEWTYPE_AS_TUPLE),
            map_format=map_format,
            wrap_root=pick_bool(Toml.KEY_WRAP_ROOT),
            inline_scalars=pick_bool(Toml.KEY_INLINE_SCALARS),
        )

    def to_toml_table(self) -> dict[str, Any]:
        """Serialize only explicitly set keys to a TOML-friendly dict.

        Returns:
            dict[str, Any]: Table with primitive types only.
        """
        out: dict[str, Any] = {}
        for key, value in (
            (Toml.KEY_OPTION_AS_ENUM, self.option_as_enum),
            (Toml.KEY_UNIT_AS_TUPLE, self.unit_as_tuple),
            (Toml.KEY_NEWTYPE_AS_TUPLE, self.newtype_as_tuple),
            (Toml.KEY_MAP_FORMAT, self.map_format.value if self.map_format else None),
            (Toml.KEY_WRAP_ROOT, self.wrap_root),
            (Toml.KEY_INLINE_SCALARS, self.inline_scalars),
        ):
            if value is not None:
                out[key] = value
        return out
