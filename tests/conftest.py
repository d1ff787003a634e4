# topmark:header:start
#
#   project      : kdlser
#   file         : conftest.py
#   file_relpath : tests/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Pytest configuration for the kdlser test suite.

This file sets up global fixtures and customizes the logging configuration for test runs,
so formatter tracing (TRACE level) is exercised by every test.

Notes:
    Tests should respect the immutable/mutable options split:

    - Build options with `kdlser.config.options.MutableOptions` (mutable), then
      `freeze()` into `kdlser.config.options.Options` for the public API.
    - Or construct `Options(...)` directly with keyword arguments.
"""

from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast

import pytest

from kdlser.config import logging
from kdlser.config.options import MutableOptions, Options
from kdlser.format.compact import CompactFormatter
from kdlser.format.human import HumanFormatter

F = TypeVar("F", bound=Callable[..., object])

# This defines the type for the decorator function itself:
# It takes a Callable (F) and returns the same Callable (F).
DecoratorType = Callable[[F], F]


def as_typed_mark(mark: Any) -> DecoratorType[Any]:
    """Wrap a pytest mark so static type checkers preserve the function type.

    Args:
        mark (Any): A pytest mark decorator such as `pytest.mark.cli`.

    Returns:
        DecoratorType[Any]: A decorator that preserves the wrapped function's type.
    """

    def _decorator(func: F) -> F:
        return cast("F", mark(func))

    return _decorator


mark_cli: DecoratorType[Any] = as_typed_mark(pytest.mark.cli)


def parametrize(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.mark.parametrize`.

    Args:
        *args (Any): Positional arguments forwarded to `pytest.mark.parametrize`.
        **kwargs (Any): Keyword arguments forwarded to `pytest.mark.parametrize`.

    Returns:
        Callable[[F], F]: A decorator that preserves the wrapped function's type.
    """
    mark: pytest.MarkDecorator = pytest.mark.parametrize(*args, **kwargs)
    return as_typed_mark(mark)


def hookimpl(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.hookimpl`."""
    return as_typed_mark(pytest.hookimpl(*args, **kwargs))


@pytest.fixture(autouse=True)
def silence_kdlser_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure kdlser's runtime log level is not forced via env during tests.

    This avoids accidental DEBUG/TRACE noise when the developer has exported
    KDLSER_LOG_LEVEL in their shell.

    Args:
        monkeypatch (pytest.MonkeyPatch): Pytest monkeypatch fixture used to manipulate
            environment variables.
    """
    monkeypatch.delenv("KDLSER_LOG_LEVEL", raising=False)


@hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:  # pylint: disable=unused-argument
    """Set the logging level to TRACE for all tests.

    Args:
        config (pytest.Config): The pytest configuration object.
    """
    logging.setup_logging(level=logging.TRACE_LEVEL)


@pytest.fixture
def isolation(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run a test in an isolated temporary working directory.

    Configuration discovery walks up from the working directory, so tests that
    rely on discovery must not see the repository's own files.

    Args:
        tmp_path (Path): The pytest-provided temporary directory for the test.
        monkeypatch (pytest.MonkeyPatch): Fixture to change the working directory.

    Returns:
        Path: The isolated working directory.
    """
    cwd: Path = tmp_path / "proj"
    cwd.mkdir()
    monkeypatch.chdir(cwd)
    return cwd


def make_options(**overrides: Any) -> Options:
    """Return frozen `Options` built from defaults and keyword overrides.

    Args:
        **overrides (Any): Attribute values applied to a `MutableOptions` builder.

    Returns:
        Options: An immutable options snapshot.
    """
    m = MutableOptions()
    for k, v in overrides.items():
        setattr(m, k, v)
    return m.freeze()


def drive_compact(calls: Callable[[CompactFormatter, io.BytesIO], None]) -> str:
    """Run raw formatter calls against a `CompactFormatter` and return the text.

    Args:
        calls (Callable[[CompactFormatter, io.BytesIO], None]): Function issuing the calls.

    Returns:
        str: Everything written to the sink, decoded as UTF-8.
    """
    sink = io.BytesIO()
    calls(CompactFormatter(), sink)
    return sink.getvalue().decode("utf-8")


def drive_human(
    calls: Callable[[HumanFormatter, io.StringIO], None],
    **formatter_kwargs: bool,
) -> str:
    """Run raw formatter calls against a `HumanFormatter` and return the text.

    Args:
        calls (Callable[[HumanFormatter, io.StringIO], None]): Function issuing the calls.
        **formatter_kwargs (bool): ``wrap_root`` / ``inline_scalars``.

    Returns:
        str: The buffer contents.
    """
    sink = io.StringIO()
    calls(HumanFormatter(**formatter_kwargs), sink)
    return sink.getvalue()
