# topmark:header:start
#
#   project      : kdlser
#   file         : constants.py
#   file_relpath : src/kdlser/constants.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""kdlser Constants."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from typing import Final

try:
    KDLSER_VERSION: str = get_version("kdlser")
except PackageNotFoundError:  # pragma: no cover - source checkout without install
    KDLSER_VERSION = "0.0.0"

# Node/field name used for values that carry no semantic name (sequence elements,
# map entries, the document root).
PLACEHOLDER_NAME: Final[str] = "-"

# Reserved KDL keywords that can never be bare identifiers.
KDL_KEYWORDS: Final[frozenset[str]] = frozenset({"null", "true", "false"})

# Human layout: columns added per nesting level, and the hard indentation ceiling.
INDENT_STEP: Final[int] = 4
MAX_INDENT: Final[int] = 252

# Configuration discovery.
DEFAULT_CONFIG_NAME: Final[str] = "kdlser.toml"
PYPROJECT_NAME: Final[str] = "pyproject.toml"
PYPROJECT_SECTION: Final[str] = "tool.kdlser"

# Environment variable consulted for the runtime log level.
LOG_LEVEL_ENV: Final[str] = "KDLSER_LOG_LEVEL"

# Inclusive bounds per integer width.
INT_BOUNDS: Final[dict[str, tuple[int, int]]] = {
    "i8": (-(2**7), 2**7 - 1),
    "i16": (-(2**15), 2**15 - 1),
    "i32": (-(2**31), 2**31 - 1),
    "i64": (-(2**63), 2**63 - 1),
    "i128": (-(2**127), 2**127 - 1),
    "u8": (0, 2**8 - 1),
    "u16": (0, 2**16 - 1),
    "u32": (0, 2**32 - 1),
    "u64": (0, 2**64 - 1),
    "u128": (0, 2**128 - 1),
}
