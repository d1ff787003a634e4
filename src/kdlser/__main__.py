# topmark:header:start
#
#   project      : kdlser
#   file         : __main__.py
#   file_relpath : src/kdlser/__main__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Module entry point for running kdlser via ``python -m kdlser``.

It delegates directly to [`kdlser.cli.main.cli`][kdlser.cli.main.cli], so the
module interface and the ``kdlser`` console script behave the same.

Examples:
    Convert a JSON document::

        python -m kdlser encode data.json
"""

from __future__ import annotations

from kdlser.cli.main import cli

if __name__ == "__main__":
    # We call the Click group directly
    cli()
