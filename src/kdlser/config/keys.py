# topmark:header:start
#
#   project      : kdlser
#   file         : keys.py
#   file_relpath : src/kdlser/config/keys.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Canonical TOML key names for kdlser configuration.

These keys are the external configuration API, as they appear at the top level
of ``kdlser.toml`` and in ``[tool.kdlser]`` inside ``pyproject.toml``. Renaming
or removing a key is a breaking change.
"""

from __future__ import annotations

from typing import Final


class Toml:
    """TOML keys used by kdlser configuration."""

    SECTION_TOOL: Final[str] = "tool"
    SECTION_KDLSER: Final[str] = "kdlser"

    KEY_OPTION_AS_ENUM: Final[str] = "option_as_enum"
    KEY_UNIT_AS_TUPLE: Final[str] = "unit_as_tuple"
    KEY_NEWTYPE_AS_TUPLE: Final[str] = "newtype_as_tuple"
    KEY_MAP_FORMAT: Final[str] = "map_format"
    KEY_WRAP_ROOT: Final[str] = "wrap_root"
    KEY_INLINE_SCALARS: Final[str] = "inline_scalars"

    ALL_KEYS: Final[frozenset[str]] = frozenset(
        {
            KEY_OPTION_AS_ENUM,
            KEY_UNIT_AS_TUPLE,
            KEY_NEWTYPE_AS_TUPLE,
            KEY_MAP_FORMAT,
            KEY_WRAP_ROOT,
            KEY_INLINE_SCALARS,
        }
    )
