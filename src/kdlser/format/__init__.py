# topmark:header:start
#
#   project      : kdlser
#   file         : __init__.py
#   file_relpath : src/kdlser/format/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""KDL output strategies and the contract they share."""

from __future__ import annotations
