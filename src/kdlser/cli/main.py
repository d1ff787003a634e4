# topmark:header:start
#
#   project      : kdlser
#   file         : main.py
#   file_relpath : src/kdlser/cli/main.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Click entry point for the kdlser CLI.

Key ideas:
- Group-level options (verbosity, color) are initialized once and placed into
  ``ctx.obj``.
- Internal logging is configured from the ``KDLSER_LOG_LEVEL`` environment
  variable and always goes to stderr.
- Subcommands read the shared console and verbosity from ``ctx.obj``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kdlser.cli.commands.encode import encode_command
from kdlser.cli.commands.version import version_command
from kdlser.cli.console import ClickConsole
from kdlser.cli.options import (
    ColorMode,
    common_color_options,
    common_verbose_options,
    resolve_color_mode,
    resolve_verbosity,
)
from kdlser.config.logging import get_logger, resolve_env_log_level, setup_logging

if TYPE_CHECKING:
    from kdlser.cli.console import ConsoleLike

logger = get_logger(__name__)


def init_common_state(
    ctx: click.Context,
    *,
    verbose: int,
    quiet: int,
    color_mode: ColorMode | None,
    no_color: bool,
) -> None:
    """Initialize shared state (verbosity & color) on the Click context.

    Args:
        ctx (click.Context): Current Click context; will have ``obj`` and ``color`` set.
        verbose (int): Count of ``-v`` flags.
        quiet (int): Count of ``-q`` flags.
        color_mode (ColorMode | None): Explicit color mode from ``--color`` (or ``None``).
        no_color (bool): Whether ``--no-color`` was passed; forces color off.
    """
    ctx.obj = ctx.obj or {}

    # Configure program-output verbosity:
    ctx.obj["verbosity_level"] = resolve_verbosity(verbose, quiet)

    # Configure internal logging via env:
    level_env = resolve_env_log_level()
    ctx.obj["log_level"] = level_env
    setup_logging(level=level_env)

    effective_color_mode = ColorMode.NEVER if no_color else (color_mode or ColorMode.AUTO)
    enable_color = resolve_color_mode(cli_mode=effective_color_mode)
    ctx.obj["color_enabled"] = enable_color
    ctx.color = enable_color

    ctx.obj["console"] = ClickConsole(enable_color=enable_color)


@click.group(
    cls=click.Group,
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
    help="kdlser: encode JSON and TOML documents as KDL.",
)
@common_verbose_options
@common_color_options
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: int,
    quiet: int,
    color_mode: ColorMode | None,
    no_color: bool,
) -> None:
    """Entry point for the kdlser CLI."""
    init_common_state(
        ctx,
        verbose=verbose,
        quiet=quiet,
        color_mode=color_mode,
        no_color=no_color,
    )
    console: ConsoleLike = ctx.obj["console"]

    if ctx.invoked_subcommand is None:
        console.info("Hint: use 'kdlser encode INPUT' to convert a document.")
        console.info()
        console.info(ctx.get_help())


cli.add_command(version_command)

cli.add_command(encode_command)

if __name__ == "__main__":
    cli()
