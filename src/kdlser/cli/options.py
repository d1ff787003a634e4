# topmark:header:start
#
#   project      : kdlser
#   file         : options.py
#   file_relpath : src/kdlser/cli/options.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Common CLI option utilities for the Click-based kdlser CLI.

This module centralizes reusable options (verbosity, color, representation
policies, configuration files) and their resolution logic, so commands and
groups can stay thin. The helpers here are Click-aware.
"""

from __future__ import annotations

import os
import sys
from enum import Enum
from typing import Callable, ParamSpec, TypeVar

import click
from click.core import ParameterSource

from kdlser.cli.cli_types import EnumChoiceParam
from kdlser.cli.errors import KdlserUsageError
from kdlser.config.logging import get_logger
from kdlser.config.options import MapFormat, MutableOptions

P = ParamSpec("P")
R = TypeVar("R")

logger = get_logger(__name__)

# Boolean representation flags: (CLI name, parameter name, help text).
POLICY_FLAGS: tuple[tuple[str, str, str], ...] = (
    (
        "option-as-enum",
        "option_as_enum",
        "Encode optionals as the variants None/Some of type Option.",
    ),
    ("unit-as-tuple", "unit_as_tuple", "Encode unit as an empty tuple instead of null."),
    (
        "newtype-as-tuple",
        "newtype_as_tuple",
        "Encode newtypes as one-element tuples instead of transparently.",
    ),
    ("wrap-root", "wrap_root", "Always write the document root as a node (human layout)."),
    (
        "inline-scalars",
        "inline_scalars",
        "Keep scalar fields on their node line as properties (human layout).",
    ),
)


def resolve_verbosity(verbose_count: int, quiet_count: int) -> int:
    """Resolve the program-output verbosity from the ``-v``/``-q`` counts.

    Args:
        verbose_count (int): Number of times the verbose flag (-v) is passed.
        quiet_count (int): Number of times the quiet flag (-q) is passed.

    Returns:
        int: ``-1`` (quiet), ``0`` (default), ``1`` (verbose) or ``2`` (more).

    Raises:
        KdlserUsageError: If both verbose and quiet flags are used simultaneously.
    """
    # They are mutually exclusive
    if verbose_count > 0 and quiet_count > 0:
        raise KdlserUsageError("The '--verbose' and '--quiet' options are mutually exclusive.")
    if quiet_count > 0:
        return -1
    return min(verbose_count, 2)


def common_verbose_options(f: Callable[P, R]) -> Callable[P, R]:
    """Adds --verbose and --quiet options to a command.

    Args:
        f: The Click command function to decorate.

    Returns:
        The decorated function with verbosity options added.
    """
    f = click.option(
        "-v",
        "--verbose",
        count=True,
        help="Increase verbosity. Specify up to twice for more detail.",
    )(f)
    f = click.option(
        "-q",
        "--quiet",
        count=True,
        help="Suppress status messages.",
    )(f)
    return f


class ColorMode(str, Enum):
    """User intent for colorized terminal output."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


def resolve_color_mode(*, cli_mode: ColorMode | None, stderr_isatty: bool | None = None) -> bool:
    """Determine whether color output should be enabled.

    Args:
        cli_mode: Explicit color mode from CLI options (auto, always, never).
        stderr_isatty: Whether stderr is a TTY; if None, auto-detected.

    Returns:
        True if color output should be enabled, False otherwise.

    Behavior:
        Honors --color and --no-color CLI flags.
        Honors FORCE_COLOR and NO_COLOR environment variables.
        Defaults to enabling color if stderr (where messages go) is a TTY.
    """
    if cli_mode == ColorMode.ALWAYS:
        return True
    if cli_mode == ColorMode.NEVER:
        return False
    force_color = os.getenv("FORCE_COLOR")
    if force_color and force_color != "0":
        return True
    if os.getenv("NO_COLOR") is not None:
        return False
    if stderr_isatty is None:
        try:
            stderr_isatty = sys.stderr.isatty()
        except (AttributeError, ValueError):
            stderr_isatty = False
    return bool(stderr_isatty)


def common_color_options(f: Callable[P, R]) -> Callable[P, R]:
    """Adds --color and --no-color options to a command.

    Args:
        f: The Click command function to decorate.

    Returns:
        The decorated function with color options added.
    """
    f = click.option(
        "--color",
        "color_mode",
        type=EnumChoiceParam(ColorMode),
        default=None,
        help="Color output: auto (default), always, or never.",
    )(f)
    f = click.option(
        "--no-color",
        "no_color",
        is_flag=True,
        help="Disable color output (equivalent to --color=never).",
    )(f)
    return f


def representation_options(f: Callable[P, R]) -> Callable[P, R]:
    """Adds the representation policy options (``--map-format`` and the flag pairs).

    Every flag is a ``--name/--no-name`` pair; a flag that is not given on the
    command line leaves the value from the configuration files untouched (see
    `collect_option_overrides`).

    Args:
        f: The Click command function to decorate.

    Returns:
        The decorated function.
    """
    for cli_name, param_name, help_text in reversed(POLICY_FLAGS):
        f = click.option(
            f"--{cli_name}/--no-{cli_name}",
            param_name,
            default=False,
            help=help_text,
        )(f)
    f = click.option(
        "--map-format",
        "map_format",
        type=EnumChoiceParam(MapFormat),
        default=None,
        help=f"Map entry representation ({', '.join(m.value for m in MapFormat)}).",
    )(f)
    return f


def config_options(f: Callable[P, R]) -> Callable[P, R]:
    """Adds ``--config`` and ``--no-config``.

    Args:
        f: The Click command function to decorate.

    Returns:
        The decorated function.
    """
    f = click.option(
        "--config",
        "config_files",
        type=click.Path(dir_okay=False, path_type=str),
        multiple=True,
        help="Read options from this TOML file (repeatable; later files win).",
    )(f)
    f = click.option(
        "--no-config",
        "no_config",
        is_flag=True,
        help="Do not discover kdlser.toml / pyproject.toml in the working directory.",
    )(f)
    return f


def collect_option_overrides(
    ctx: click.Context,
    *,
    map_format: MapFormat | None,
    **flags: bool,
) -> MutableOptions:
    """Build the CLI layer of the options, keeping only explicitly given flags.

    Args:
        ctx (click.Context): Current Click context (for parameter sources).
        map_format (MapFormat | None): Value of ``--map-format``.
        **flags (bool): Values of the boolean policy flags, keyed by parameter name.

    Returns:
        MutableOptions: Options with unset fields for flags left at their default.
    """
    explicit: dict[str, bool] = {}
    for name, value in flags.items():
        if ctx.get_parameter_source(name) is ParameterSource.COMMANDLINE:
            explicit[name] = value
    logger.debug("CLI option overrides: %s (map_format=%s)", explicit, map_format)
    return MutableOptions(map_format=map_format, **explicit)
