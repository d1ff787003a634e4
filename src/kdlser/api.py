# topmark:header:start
#
#   project      : kdlser
#   file         : api.py
#   file_relpath : src/kdlser/api.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Public entry points for encoding values to KDL.

Two output strategies are available:

- **compact** (`to_writer`, `to_bytes_compact`, `to_string_compact`): streams
  dense single-line KDL to any byte sink;
- **human** (`to_string`): indented KDL built in memory.

Examples:
    ```python
    from kdlser import to_string

    print(to_string({"name": "kdl", "tags": ["a", "b"]}))
    ```

Every function accepts optional [`Options`][kdlser.config.options.Options]; when
omitted, the defaults apply.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Any

from kdlser.config.logging import get_logger
from kdlser.config.options import Options
from kdlser.format.compact import CompactFormatter
from kdlser.format.human import HumanFormatter
from kdlser.ser.serializer import Serializer

if TYPE_CHECKING:
    from kdlser.config.logging import KdlserLogger
    from kdlser.format.compact import ByteSink

logger: KdlserLogger = get_logger(__name__)


def to_writer(writer: ByteSink, value: Any, options: Options | None = None) -> None:
    """Encode ``value`` as compact KDL into a byte sink.

    Args:
        writer (ByteSink): Destination with a ``write(bytes)`` method.
        value (Any): Value to encode.
        options (Options | None): Representation policies.

    Raises:
        KdlIOError: If writing to ``writer`` failed.
        KdlCustomError: If ``value`` refuses to serialize.
    """
    Serializer(writer, CompactFormatter(), options).encode(value)


def to_bytes_compact(value: Any, options: Options | None = None) -> bytes:
    """Encode ``value`` as compact KDL and return the UTF-8 bytes."""
    buffer = io.BytesIO()
    to_writer(buffer, value, options)
    return buffer.getvalue()


def to_string_compact(value: Any, options: Options | None = None) -> str:
    """Encode ``value`` as compact KDL and return the text."""
    return to_bytes_compact(value, options).decode("utf-8")


def to_string(value: Any, options: Options | None = None) -> str:
    """Encode ``value`` as human-friendly, indented KDL.

    Args:
        value (Any): Value to encode.
        options (Options | None): Representation policies; ``wrap_root`` and
            ``inline_scalars`` control the layout.

    Returns:
        str: The KDL document.

    Raises:
        KdlCustomError: If ``value`` refuses to serialize.
    """
    opts: Options = options if options is not None else Options()
    buffer = io.StringIO()
    formatter = HumanFormatter(wrap_root=opts.wrap_root, inline_scalars=opts.inline_scalars)
    Serializer(buffer, formatter, opts).encode(value)
    text: str = buffer.getvalue()
    logger.debug("human layout produced %d characters", len(text))
    return text
