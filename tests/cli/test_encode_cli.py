# topmark:header:start
#
#   project      : kdlser
#   file         : test_encode_cli.py
#   file_relpath : tests/cli/test_encode_cli.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI tests: `encode` conversions, options, configuration and exit codes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from kdlser.cli.exit_codes import ExitCode
from tests.cli.conftest import assert_exit_code, assert_SUCCESS, run_cli_in
from tests.conftest import parametrize

if TYPE_CHECKING:
    from pathlib import Path

    from click.testing import Result

pytestmark: pytest.MarkDecorator = pytest.mark.cli

DOCUMENT_JSON: str = '{"name": "kdl", "tags": ["a", "b"]}'

CARGO_TOML: str = """\
[package]
name = "kdl"
version = "0.0.0"
authors = ["Kat Marchán <kzm@zkat.tech>"]

[dependencies]
nom = "6.0.1"
"""


def test_json_from_stdin_to_human(tmp_path: Path) -> None:
    """Objects become structs: scalars are properties, lists are arguments."""
    result: Result = run_cli_in(tmp_path, ["encode", "--no-config"], input_text=DOCUMENT_JSON)
    assert_SUCCESS(result)
    assert result.stdout == '\nname r"kdl"\ntags r"a" r"b"\n'


def test_json_from_stdin_to_compact(tmp_path: Path) -> None:
    result: Result = run_cli_in(
        tmp_path, ["encode", "-", "--compact", "--no-config"], input_text=DOCUMENT_JSON
    )
    assert_SUCCESS(result)
    assert result.stdout == '- { name r"kdl"; tags { - r"a"; - r"b"; }; }\n'


def test_toml_file_to_output_file(tmp_path: Path) -> None:
    (tmp_path / "Cargo.toml").write_text(CARGO_TOML, encoding="utf-8")
    result: Result = run_cli_in(tmp_path, ["encode", "Cargo.toml", "-o", "Cargo.kdl"])
    assert_SUCCESS(result)
    assert (tmp_path / "Cargo.kdl").read_text(encoding="utf-8") == (
        '\npackage name=r"kdl" version=r"0.0.0" {\n'
        '    authors r"Kat Marchán <kzm@zkat.tech>"\n'
        "}\n"
        'dependencies nom=r"6.0.1"\n'
    )


def test_explicit_input_format(tmp_path: Path) -> None:
    result: Result = run_cli_in(
        tmp_path,
        ["encode", "--input-format", "TOML", "--compact", "--no-config"],
        input_text='answer = 42\n',
    )
    assert_SUCCESS(result)
    assert result.stdout == "- { answer 42; }\n"


@parametrize(
    ("map_format", "expected"),
    [
        ("infer", '- { - { key r"a"; value 1; }; }\n'),
        ("tuple", '- { - { - r"a"; - 1; }; }\n'),
        ("struct", '- { key r"a"; value 1; }\n'),
    ],
)
def test_objects_as_maps(tmp_path: Path, map_format: str, expected: str) -> None:
    result: Result = run_cli_in(
        tmp_path,
        ["encode", "--compact", "--no-config", "--objects-as-maps", "--map-format", map_format],
        input_text='{"a": 1}',
    )
    assert_SUCCESS(result)
    assert result.stdout == expected


def test_option_as_enum_flag(tmp_path: Path) -> None:
    result: Result = run_cli_in(
        tmp_path,
        ["encode", "--compact", "--no-config", "--option-as-enum"],
        input_text="[null, 1]",
    )
    assert_SUCCESS(result)
    assert result.stdout == "- { (None)- null; - 1; }\n"


def test_discovered_config_applies(tmp_path: Path) -> None:
    (tmp_path / "kdlser.toml").write_text("wrap_root = true\n", encoding="utf-8")
    result: Result = run_cli_in(tmp_path, ["encode"], input_text='{"x": 1}')
    assert_SUCCESS(result)
    assert result.stdout == "- x=1"


def test_command_line_flag_overrides_config(tmp_path: Path) -> None:
    (tmp_path / "kdlser.toml").write_text("wrap_root = true\n", encoding="utf-8")
    result: Result = run_cli_in(tmp_path, ["encode", "--no-wrap-root"], input_text='{"x": 1}')
    assert_SUCCESS(result)
    assert result.stdout == "\nx 1\n"


def test_no_config_skips_discovery(tmp_path: Path) -> None:
    (tmp_path / "kdlser.toml").write_text("wrap_root = true\n", encoding="utf-8")
    result: Result = run_cli_in(tmp_path, ["encode", "--no-config"], input_text='{"x": 1}')
    assert_SUCCESS(result)
    assert result.stdout == "\nx 1\n"


def test_explicit_config_file(tmp_path: Path) -> None:
    (tmp_path / "layout.toml").write_text("inline_scalars = false\n", encoding="utf-8")
    result: Result = run_cli_in(
        tmp_path,
        ["encode", "--no-config", "--config", "layout.toml"],
        input_text='{"p": {"x": 1}}',
    )
    assert_SUCCESS(result)
    assert result.stdout == "\np {\n    x 1\n}\n"


def test_missing_input_file(tmp_path: Path) -> None:
    result: Result = run_cli_in(tmp_path, ["encode", "missing.json", "--no-config"])
    assert_exit_code(result, ExitCode.FILE_NOT_FOUND)
    assert "Input file not found" in result.output


@parametrize(
    "document",
    [
        "{not json",
        "1e999",
        str(2**130),
    ],
)
def test_bad_data(tmp_path: Path, document: str) -> None:
    """Malformed documents and unencodable values are data errors."""
    result: Result = run_cli_in(tmp_path, ["encode", "--no-config"], input_text=document)
    assert_exit_code(result, ExitCode.DATA_ERROR)


def test_invalid_toml_input(tmp_path: Path) -> None:
    (tmp_path / "bad.toml").write_text("key = = 1\n", encoding="utf-8")
    result: Result = run_cli_in(tmp_path, ["encode", "bad.toml", "--no-config"])
    assert_exit_code(result, ExitCode.DATA_ERROR)
    assert "Invalid TOML" in result.output


def test_invalid_config_file(tmp_path: Path) -> None:
    (tmp_path / "kdlser.toml").write_text('wrap_root = "yes"\n', encoding="utf-8")
    result: Result = run_cli_in(tmp_path, ["encode"], input_text="{}")
    assert_exit_code(result, ExitCode.CONFIG_ERROR)


def test_missing_config_file(tmp_path: Path) -> None:
    result: Result = run_cli_in(
        tmp_path, ["encode", "--no-config", "--config", "nope.toml"], input_text="{}"
    )
    assert_exit_code(result, ExitCode.CONFIG_ERROR)


def test_verbose_reports_conversion(tmp_path: Path) -> None:
    (tmp_path / "data.json").write_text("[1]", encoding="utf-8")
    result: Result = run_cli_in(
        tmp_path, ["--no-color", "-v", "encode", "data.json", "-o", "data.kdl", "--no-config"]
    )
    assert_SUCCESS(result)
    assert "Encoded data.json (json) to data.kdl (human)" in result.output
    assert (tmp_path / "data.kdl").read_text(encoding="utf-8") == "\n- 1\n"
