# topmark:header:start
#
#   project      : kdlser
#   file         : lexical.py
#   file_relpath : src/kdlser/lexical.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""KDL lexical helpers shared by all formatters.

Rules implemented here:

- **Bare identifiers**: a name may be written unquoted only if it cannot be
  confused with another token. See `is_bare_identifier`.
- **Raw strings**: `r<hashes>"..."<hashes>` performs no escape processing. The
  hash fence must be longer than any run of `#` that follows a `"` inside the
  content. See `raw_string_fence`.
- **Numbers**: floats use Python's shortest round-trip `repr`; binary32 values
  are shortened to the fewest digits that still round-trip through binary32.

All names that fail the bare-identifier test (node names, property keys, type
annotations) fall back to raw-string quoting through `format_name`.
"""

from __future__ import annotations

import re
import struct
from typing import Final

from kdlser.constants import KDL_KEYWORDS

# Characters that terminate or delimit tokens in KDL, plus the byte-order mark.
RESERVED_CHARS: Final[frozenset[str]] = frozenset('\\/(){}<>;[]=,"\ufeff')

_ASCII_DIGITS: Final[str] = "0123456789"

# A quote followed by its (possibly empty) run of hashes.
_QUOTE_HASHES: Final[re.Pattern[str]] = re.compile(r'"(#*)')

_F32: Final[struct.Struct] = struct.Struct("<f")


def is_bare_identifier(name: str) -> bool:
    """Return True if ``name`` may be written as an unquoted KDL identifier.

    A name is rejected when it:

    - is empty;
    - contains whitespace or a control character;
    - contains one of ``\\ / ( ) { } < > ; [ ] = , "`` or U+FEFF;
    - starts with a digit, or with ``+``/``-`` followed by a digit;
    - starts with ``r#`` (raw-string prefix);
    - is one of the keywords ``null``, ``true``, ``false``.

    Args:
        name (str): Candidate identifier.

    Returns:
        bool: True if the name is a legal bare identifier.
    """
    if not name or name in KDL_KEYWORDS:
        return False
    first: str = name[0]
    if first in _ASCII_DIGITS:
        return False
    if first in "+-" and len(name) > 1 and name[1] in _ASCII_DIGITS:
        return False
    if name.startswith("r#"):
        return False
    return not any(ch in RESERVED_CHARS or ch.isspace() or ord(ch) < 0x20 for ch in name)


def raw_string_fence(text: str) -> int | None:
    """Return the number of hashes needed to wrap ``text`` in a raw string.

    Every ``"`` in the content is followed by some run of ``#`` (possibly empty).
    The fence must be one longer than the longest such run.

    Args:
        text (str): Raw string content.

    Returns:
        int | None: ``None`` if ``text`` contains no ``"`` (no fence needed, a
        plain ``r"..."`` is enough); otherwise the minimal fence length (>= 1).
    """
    longest: int | None = None
    for match in _QUOTE_HASHES.finditer(text):
        run: int = len(match.group(1))
        if longest is None or run > longest:
            longest = run
    return None if longest is None else longest + 1


def quote_raw(text: str) -> str:
    """Quote ``text`` as a KDL raw string with the minimal hash fence.

    Args:
        text (str): Content to quote.

    Returns:
        str: The raw string literal, e.g. ``r"plain"`` or ``r#"say "hi""#``.
    """
    hashes: str = "#" * (raw_string_fence(text) or 0)
    return f'r{hashes}"{text}"{hashes}'


def format_name(name: str) -> str:
    """Render a node name, property key or type annotation.

    Args:
        name (str): The name to render.

    Returns:
        str: ``name`` unchanged if it is a bare identifier, otherwise its raw-string quoting.
    """
    return name if is_bare_identifier(name) else quote_raw(name)


def format_annotation(name: str | None) -> str:
    """Render an optional type annotation as ``(name)``; empty when absent."""
    return "" if name is None else f"({format_name(name)})"


def format_bool(value: bool) -> str:
    """Render a boolean literal."""
    return "true" if value else "false"


def format_float(value: float, *, single: bool = False) -> str:
    """Render a finite float as a KDL decimal literal.

    Args:
        value (float): A finite float.
        single (bool): If True, treat ``value`` as binary32 and emit the shortest
            decimal form that round-trips through binary32.

    Returns:
        str: The decimal literal (``repr`` style, always with a fraction or exponent).
    """
    if not single:
        return repr(value)
    narrowed: float = _F32.unpack(_F32.pack(value))[0]
    text: str = repr(narrowed)
    for digits in range(1, 10):
        candidate: str = f"{narrowed:.{digits}g}"
        if _F32.unpack(_F32.pack(float(candidate)))[0] == narrowed:
            text = repr(float(candidate))
            break
    return text
