# topmark:header:start
#
#   project      : kdlser
#   file         : loaders.py
#   file_relpath : src/kdlser/config/loaders.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Load kdlser options from TOML sources.

Options can come from:
- ``kdlser.toml`` (keys at the top level), or
- ``pyproject.toml`` (keys under ``[tool.kdlser]``).

Parsing is done with `tomlkit` and returned as plain `dict` structures. Sources
are merged last-wins through
[`MutableOptions.merge_with`][kdlser.config.options.MutableOptions.merge_with].
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from kdlser.config.keys import Toml
from kdlser.config.logging import get_logger
from kdlser.config.options import MutableOptions, Options
from kdlser.constants import DEFAULT_CONFIG_NAME, PYPROJECT_NAME

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from kdlser.config.logging import KdlserLogger

logger: KdlserLogger = get_logger(__name__)

TomlTable = dict[str, Any]


def parse_toml_text(text: str, *, source: str = "<string>") -> TomlTable:
    """Parse TOML text into a plain dict.

    Args:
        text (str): TOML document.
        source (str): Name used in error messages.

    Returns:
        TomlTable: The unwrapped document.

    Raises:
        ValueError: If the text is not valid TOML.
    """
    try:
        doc: tomlkit.TOMLDocument = tomlkit.parse(text)
    except TomlkitParseError as exc:
        raise ValueError(f"Invalid TOML in {source}: {exc}") from exc
    data_any: Any = doc.unwrap()
    return cast("TomlTable", data_any) if isinstance(data_any, dict) else {}


def load_toml_dict(path: Path) -> TomlTable:
    """Read and parse a TOML file.

    Args:
        path (Path): File to read.

    Returns:
        TomlTable: The unwrapped document.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid TOML.
    """
    text: str = path.read_text(encoding="utf-8")
    return parse_toml_text(text, source=str(path))


def extract_options_table(data: Mapping[str, Any], path: Path) -> Mapping[str, Any] | None:
    """Return the table holding kdlser options for a parsed file.

    For ``pyproject.toml`` this is ``[tool.kdlser]`` (``None`` if absent); for any
    other file it is the whole document.
    """
    if path.name != PYPROJECT_NAME:
        return data
    tool: Any = data.get(Toml.SECTION_TOOL)
    if not isinstance(tool, dict):
        return None
    table: Any = cast("dict[str, Any]", tool).get(Toml.SECTION_KDLSER)
    return cast("Mapping[str, Any]", table) if isinstance(table, dict) else None


def load_options_file(path: Path) -> MutableOptions:
    """Load options from a ``kdlser.toml`` or ``pyproject.toml`` file.

    Args:
        path (Path): Configuration file.

    Returns:
        MutableOptions: Options set in the file (unset keys stay ``None``).
    """
    data: TomlTable = load_toml_dict(path)
    table: Mapping[str, Any] | None = extract_options_table(data, path)
    if table is None:
        logger.debug("No [tool.kdlser] table in %s", path)
        return MutableOptions()
    options: MutableOptions = MutableOptions.from_toml_table(table)
    logger.debug("Loaded options from %s: %s", path, options.to_toml_table())
    return options


def discover_config_file(start: Path) -> Path | None:
    """Find the nearest configuration file at or above ``start``.

    In each directory, ``kdlser.toml`` wins over a ``pyproject.toml`` that
    carries a ``[tool.kdlser]`` table.

    Args:
        start (Path): Directory where the search begins.

    Returns:
        Path | None: The configuration file, or ``None`` if there is none.
    """
    for directory in (start, *start.parents):
        candidate: Path = directory / DEFAULT_CONFIG_NAME
        if candidate.is_file():
            logger.info("Using configuration file %s", candidate)
            return candidate
        pyproject: Path = directory / PYPROJECT_NAME
        if pyproject.is_file():
            if extract_options_table(load_toml_dict(pyproject), pyproject) is not None:
                logger.info("Using [tool.kdlser] from %s", pyproject)
                return pyproject
    return None


def resolve_options(
    *,
    config_files: Iterable[Path] = (),
    discover_from: Path | None = None,
    overrides: MutableOptions | None = None,
) -> Options:
    """Build the effective options for a session.

    Merge order (last wins): defaults → discovered file → explicit config
    files (in order) → ``overrides``.

    Args:
        config_files (Iterable[Path]): Explicit configuration files.
        discover_from (Path | None): Directory to start discovery from; ``None``
            disables discovery.
        overrides (MutableOptions | None): Highest-priority values (CLI flags).

    Returns:
        Options: The resolved immutable options.
    """
    merged = MutableOptions()
    if discover_from is not None:
        discovered: Path | None = discover_config_file(discover_from)
        if discovered is not None:
            merged = merged.merge_with(load_options_file(discovered))
    for path in config_files:
        merged = merged.merge_with(load_options_file(Path(path)))
    if overrides is not None:
        merged = merged.merge_with(overrides)
    return merged.freeze()
