# topmark:header:start
#
#   project      : kdlser
#   file         : test_lexical.py
#   file_relpath : tests/lexical/test_lexical.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for KDL lexical helpers: bare identifiers, raw-string fences, floats."""

from __future__ import annotations

import re

from hypothesis import given

from kdlser.lexical import (
    RESERVED_CHARS,
    format_annotation,
    format_bool,
    format_float,
    format_name,
    is_bare_identifier,
    quote_raw,
    raw_string_fence,
)
from tests.conftest import parametrize
from tests.strategies_kdlser import s_quote_heavy_text, s_text


@parametrize(
    "name",
    ["valid_name", "-", "license-file", "a1", "+", "-x", "über", "true1", "r"],
)
def test_bare_identifiers_accepted(name: str) -> None:
    """It should accept names that cannot be confused with another token."""
    assert is_bare_identifier(name)


@parametrize(
    "name",
    [
        "",
        "123abc",
        "-1",
        "+9x",
        "r#text",
        "null",
        "true",
        "false",
        "has space",
        "tab\there",
        'quo"te',
        "semi;colon",
        "a=b",
        "(x)",
        "brace{",
        "slash/",
        "back\\slash",
        "bom\ufeff",
        "ctl\x01",
    ],
)
def test_bare_identifiers_rejected(name: str) -> None:
    """It should reject names that a KDL parser would read as something else."""
    assert not is_bare_identifier(name)


@given(text=s_text)
def test_names_with_reserved_chars_are_never_bare(text: str) -> None:
    """Any name containing a reserved character must be quoted."""
    for ch in RESERVED_CHARS:
        assert not is_bare_identifier(text + ch)


def test_raw_string_fence_without_quotes() -> None:
    """It should report that no fence is needed when there is no quote."""
    assert raw_string_fence("plain text ###") is None
    assert raw_string_fence("") is None


@parametrize(
    ("text", "fence"),
    [
        ('say "hi"', 1),
        ('"#', 2),
        ('a"##b"#', 3),
        ('"', 1),
    ],
)
def test_raw_string_fence_examples(text: str, fence: int) -> None:
    """The fence is one longer than the longest hash run after a quote."""
    assert raw_string_fence(text) == fence


@given(text=s_quote_heavy_text)
def test_raw_string_fence_is_minimal_and_safe(text: str) -> None:
    """The chosen fence never appears after a quote inside the content."""
    fence: int | None = raw_string_fence(text)
    if fence is None:
        assert '"' not in text
        return
    runs: list[int] = [len(m.group(1)) for m in re.finditer(r'"(#*)', text)]
    assert fence == max(runs) + 1
    assert '"' + "#" * fence not in text


@given(text=s_quote_heavy_text)
def test_quote_raw_wraps_content_verbatim(text: str) -> None:
    """Raw strings carry their content unescaped between matching fences."""
    hashes: str = "#" * (raw_string_fence(text) or 0)
    assert quote_raw(text) == f'r{hashes}"{text}"{hashes}'


def test_format_name_and_annotation() -> None:
    """Names fall back to raw-string quoting; annotations are parenthesized."""
    assert format_name("name") == "name"
    assert format_name("123abc") == 'r"123abc"'
    assert format_name('say "hi"') == 'r#"say "hi""#'
    assert format_annotation(None) == ""
    assert format_annotation("Some") == "(Some)"
    assert format_annotation("my type") == '(r"my type")'


def test_format_bool() -> None:
    assert format_bool(True) == "true"
    assert format_bool(False) == "false"


@parametrize(
    ("value", "single", "expected"),
    [
        (1.5, False, "1.5"),
        (0.0, False, "0.0"),
        (-2.25, False, "-2.25"),
        (1e300, False, "1e+300"),
        (0.1, True, "0.1"),
        (3.14, True, "3.14"),
        (16777216.0, True, "16777216.0"),
        (0.1, False, "0.1"),
    ],
)
def test_format_float(value: float, single: bool, expected: str) -> None:
    """Floats use their shortest round-trip decimal form."""
    assert format_float(value, single=single) == expected
