# topmark:header:start
#
#   project      : kdlser
#   file         : encode.py
#   file_relpath : src/kdlser/cli/commands/encode.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""kdlser `encode` command.

Reads a JSON or TOML document and writes it as KDL, either in the indented
human layout (default) or in the compact single-line layout (``--compact``).

JSON objects and TOML tables become structs (one node or property per key).
With ``--objects-as-maps`` they stay maps, so ``--map-format`` applies to them.

Input and output default to ``-`` (stdin/stdout). Options are resolved in this
order (last wins): defaults → discovered ``kdlser.toml`` / ``[tool.kdlser]`` →
``--config`` files → command-line flags.

Examples:
    Convert a Cargo-style manifest::

        kdlser encode Cargo.toml -o Cargo.kdl

    Compact output with flattened maps::

        kdlser encode data.json --compact --map-format tuple
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from kdlser.api import to_string, to_writer
from kdlser.cli.cli_types import EnumChoiceParam, InputFormat
from kdlser.cli.errors import (
    KdlserConfigError,
    KdlserDataError,
    KdlserFileNotFoundError,
    KdlserIOError,
)
from kdlser.cli.options import collect_option_overrides, config_options, representation_options
from kdlser.config.loaders import parse_toml_text, resolve_options
from kdlser.config.logging import get_logger
from kdlser.errors import KdlCustomError, KdlIOError
from kdlser.ser.traverse import Struct

if TYPE_CHECKING:
    from kdlser.cli.console import ConsoleLike
    from kdlser.config.logging import KdlserLogger
    from kdlser.config.options import MapFormat, MutableOptions, Options

logger: KdlserLogger = get_logger(__name__)

STDIO: str = "-"


def read_input(input_path: str) -> str:
    """Read the input document as text.

    Args:
        input_path (str): File path, or ``-`` for stdin.

    Returns:
        str: The document text.

    Raises:
        KdlserFileNotFoundError: If the file does not exist.
        KdlserDataError: If the file is not valid UTF-8.
        KdlserIOError: If the file cannot be read.
    """
    if input_path == STDIO:
        return click.get_text_stream("stdin", encoding="utf-8").read()
    path = Path(input_path)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise KdlserFileNotFoundError(f"Input file not found: {input_path}") from None
    except UnicodeDecodeError as exc:
        raise KdlserDataError(f"{input_path} is not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise KdlserIOError(f"Cannot read {input_path}: {exc}") from exc


def detect_input_format(input_path: str, requested: InputFormat | None) -> InputFormat:
    """Return the concrete input format (never `InputFormat.AUTO`)."""
    if requested is not None and requested is not InputFormat.AUTO:
        return requested
    if input_path != STDIO and Path(input_path).suffix.lower() == ".toml":
        return InputFormat.TOML
    return InputFormat.JSON


def parse_document(text: str, input_format: InputFormat, *, source: str) -> Any:
    """Parse ``text`` into plain Python values.

    Raises:
        KdlserDataError: If the document is malformed.
    """
    if input_format is InputFormat.TOML:
        try:
            return parse_toml_text(text, source=source)
        except ValueError as exc:
            raise KdlserDataError(str(exc)) from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise KdlserDataError(f"Invalid JSON in {source}: {exc}") from exc


def objects_as_structs(document: Any, *, name: str = "object") -> Any:
    """Return ``document`` with every string-keyed object replaced by a `Struct`.

    Args:
        document (Any): Parsed JSON or TOML value.
        name (str): Struct name given to converted objects.

    Returns:
        Any: The converted value; lists are converted element-wise.
    """
    if isinstance(document, dict):
        if not all(isinstance(key, str) for key in document):
            return {key: objects_as_structs(item, name=name) for key, item in document.items()}
        return Struct(
            name=name,
            fields={key: objects_as_structs(item, name=name) for key, item in document.items()},
        )
    if isinstance(document, list):
        return [objects_as_structs(item, name=name) for item in document]
    return document


def load_effective_options(
    *,
    config_files: tuple[str, ...],
    no_config: bool,
    overrides: MutableOptions,
) -> Options:
    """Resolve options from configuration files and CLI overrides.

    Raises:
        KdlserConfigError: If a configuration file is unreadable or invalid.
    """
    try:
        return resolve_options(
            config_files=[Path(p) for p in config_files],
            discover_from=None if no_config else Path.cwd(),
            overrides=overrides,
        )
    except (OSError, ValueError) as exc:
        raise KdlserConfigError(str(exc)) from exc


def write_output(output_path: str, document: Any, options: Options, *, compact: bool) -> None:
    """Encode ``document`` and write it to ``output_path`` (``-`` for stdout).

    Raises:
        KdlserDataError: If the document cannot be encoded.
        KdlserIOError: If the output cannot be written.
    """
    try:
        if compact:
            with click.open_file(output_path, "wb") as fh:
                to_writer(fh, document, options)
                fh.write(b"\n")
        else:
            text: str = to_string(document, options)
            with click.open_file(output_path, "w", encoding="utf-8") as fh:
                fh.write(text)
    except KdlCustomError as exc:
        raise KdlserDataError(f"Cannot encode document: {exc}") from exc
    except (KdlIOError, OSError) as exc:
        raise KdlserIOError(f"Cannot write {output_path}: {exc}") from exc


@click.command(
    name="encode",
    help="Convert a JSON or TOML document to KDL.",
)
@click.argument("input_path", metavar="INPUT", type=str, default=STDIO)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=str,
    default=STDIO,
    help="Output file ('-' for stdout).",
)
@click.option(
    "--input-format",
    "input_format",
    type=EnumChoiceParam(InputFormat),
    default=None,
    help=f"Input format ({', '.join(f.value for f in InputFormat)}); default: by suffix.",
)
@click.option(
    "--compact",
    is_flag=True,
    default=False,
    help="Write compact single-line KDL instead of the indented layout.",
)
@click.option(
    "--objects-as-maps",
    "objects_as_maps",
    is_flag=True,
    default=False,
    help="Encode objects and tables as maps instead of structs.",
)
@representation_options
@config_options
@click.pass_context
def encode_command(
    ctx: click.Context,
    *,
    input_path: str,
    output_path: str,
    input_format: InputFormat | None,
    compact: bool,
    objects_as_maps: bool,
    map_format: MapFormat | None,
    config_files: tuple[str, ...],
    no_config: bool,
    **flags: bool,
) -> None:
    """Convert a JSON or TOML document to KDL.

    Args:
        ctx (click.Context): Current Click context.
        input_path (str): Input file, or ``-`` for stdin.
        output_path (str): Output file, or ``-`` for stdout.
        input_format (InputFormat | None): Explicit input format.
        compact (bool): Use the compact layout.
        objects_as_maps (bool): Keep objects as maps instead of structs.
        map_format (MapFormat | None): Map representation override.
        config_files (tuple[str, ...]): Extra configuration files.
        no_config (bool): Skip configuration discovery.
        **flags (bool): Boolean representation policies.
    """
    ctx.ensure_object(dict)
    console: ConsoleLike = ctx.obj["console"]
    verbosity: int = ctx.obj.get("verbosity_level", 0)

    overrides: MutableOptions = collect_option_overrides(ctx, map_format=map_format, **flags)
    options: Options = load_effective_options(
        config_files=config_files,
        no_config=no_config,
        overrides=overrides,
    )
    logger.debug("effective options: %s", options)

    fmt: InputFormat = detect_input_format(input_path, input_format)
    source: str = "<stdin>" if input_path == STDIO else input_path
    document: Any = parse_document(read_input(input_path), fmt, source=source)
    if not objects_as_maps:
        document = objects_as_structs(document, name=fmt.value)

    write_output(output_path, document, options, compact=compact)

    if verbosity > 0:
        layout: str = "compact" if compact else "human"
        target: str = "<stdout>" if output_path == STDIO else output_path
        console.info(
            console.styled(f"Encoded {source} ({fmt.value}) to {target} ({layout})", fg="green")
        )
