# topmark:header:start
#
#   project      : kdlser
#   file         : __init__.py
#   file_relpath : src/kdlser/config/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration layer: representation options, TOML loading and logging."""

from __future__ import annotations
