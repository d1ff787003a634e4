# topmark:header:start
#
#   project      : kdlser
#   file         : logging.py
#   file_relpath : src/kdlser/config/logging.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Logging for kdlser: a TRACE level, a TRACE-aware logger and colored output.

Formatters and the serializer log per-event detail at TRACE (below DEBUG), so
enabling DEBUG shows one line per session while TRACE shows every shape call.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING, Final, cast

from yachalk import chalk

from kdlser.constants import LOG_LEVEL_ENV

if TYPE_CHECKING:
    from collections.abc import Mapping

TRACE_LEVEL: Final[int] = logging.DEBUG - 5

LOG_FORMAT: Final[str] = "[%(levelname)s] %(message)s"
DEBUG_LOG_FORMAT: Final[str] = "[%(levelname)s] [%(name)s:%(lineno)d] %(message)s"


class KdlserLogger(logging.Logger):
    """Logger with a `trace()` method for the TRACE level."""

    def trace(
        self,
        msg: object,
        *args: object,
        extra: Mapping[str, object] | None = None,
    ) -> None:
        """Log ``msg % args`` at TRACE.

        Args:
            msg (object): The message to be logged.
            *args (object): Arguments merged into ``msg``.
            extra (Mapping[str, object] | None): Extra attributes for the record.
        """
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, extra=extra, stacklevel=2)


logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.setLoggerClass(KdlserLogger)


# Highest threshold first; resolved on `chalk` per record.
_LEVEL_STYLES: Final[tuple[tuple[int, str], ...]] = (
    (logging.ERROR, "red"),
    (logging.WARNING, "yellow"),
    (logging.INFO, "green"),
    (logging.DEBUG, "gray"),
)


class ChalkFormatter(logging.Formatter):
    """Formatter coloring each record by severity with yachalk."""

    def format(self, record: logging.LogRecord) -> str:
        """Format ``record`` and color it by level.

        Args:
            record (logging.LogRecord): The record to format.

        Returns:
            str: The colored message.
        """
        message: str = super().format(record)
        for threshold, style in _LEVEL_STYLES:
            if record.levelno >= threshold:
                return getattr(chalk, style)(message)
        return chalk.blue(message)


def resolve_env_log_level() -> int | None:
    """Return the level named by ``KDLSER_LOG_LEVEL``, or None if unset or unknown.

    Accepts level names (``TRACE``, ``debug``, ``WARN``) and numeric values.
    """
    raw: str = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if not raw:
        return None
    if raw.isdigit():
        return int(raw)
    # getLevelName maps registered names to numbers and anything else to a string.
    level: int | str = logging.getLevelName(raw)
    return level if isinstance(level, int) else None


def setup_logging(level: int | None = None) -> None:
    """Install a single colored stderr handler on the root logger.

    If ``level`` is None, ``KDLSER_LOG_LEVEL`` is consulted; otherwise only
    CRITICAL records are shown. KDL written to stdout never mixes with log output.
    """
    if level is None:
        level = resolve_env_log_level() or logging.CRITICAL

    root_logger: logging.Logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(ChalkFormatter(LOG_FORMAT if level >= logging.INFO else DEBUG_LOG_FORMAT))
    root_logger.addHandler(stream)


def get_logger(name: str) -> KdlserLogger:
    """Return the `KdlserLogger` called ``name``."""
    return cast("KdlserLogger", logging.getLogger(name))
