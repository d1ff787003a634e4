# topmark:header:start
#
#   project      : kdlser
#   file         : version.py
#   file_relpath : src/kdlser/cli/commands/version.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""kdlser `version` command.

Prints the current kdlser version as installed in the active Python environment.
"""

from __future__ import annotations

import click

from kdlser.constants import KDLSER_VERSION


@click.command(
    name="version",
    help="Show the current version of kdlser.",
)
def version_command() -> None:
    """Show the current version of kdlser."""
    click.echo(KDLSER_VERSION)
