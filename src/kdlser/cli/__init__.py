# topmark:header:start
#
#   project      : kdlser
#   file         : __init__.py
#   file_relpath : src/kdlser/cli/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Command line interface for kdlser."""

from __future__ import annotations
