# topmark:header:start
#
#   project      : kdlser
#   file         : __init__.py
#   file_relpath : src/kdlser/cli/commands/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""kdlser CLI subcommands."""

from __future__ import annotations
