# topmark:header:start
#
#   project      : kdlser
#   file         : errors.py
#   file_relpath : src/kdlser/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Errors raised while encoding a value to KDL.

Encoding knows two failure kinds, and both abort the whole session:

- `KdlIOError`: writing to the sink failed. The original `OSError` is chained
  as `__cause__`.
- `KdlCustomError`: the value itself refuses to serialize (integer out of range,
  non-finite float, unsupported Python type, or a message raised by user code
  through `KdlError.custom`).

Misuse of the formatter protocol by a traversal (double type annotation, map
value without key, unbalanced groups) is a bug, not bad input. It is reported
with `kdlser.format.contract.ProtocolViolation`, which is deliberately *not* a
`KdlError`.
"""

from __future__ import annotations


class KdlError(Exception):
    """Base class for all encoding errors."""

    @classmethod
    def custom(cls, message: object) -> KdlCustomError:
        """Build a custom error from any message.

        Intended for `kdl_serialize()` implementations that need to reject a value.

        Args:
            message (object): Message; converted with `str()`.

        Returns:
            KdlCustomError: The error to raise.
        """
        return KdlCustomError(str(message))


class KdlCustomError(KdlError):
    """A value refused to serialize."""


class KdlIOError(KdlError):
    """Writing to the output sink failed."""

    def __str__(self) -> str:
        cause: BaseException | None = self.__cause__
        if cause is not None:
            return f"IO error: {cause}"
        return "IO error"
