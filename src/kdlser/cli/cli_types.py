# topmark:header:start
#
#   project      : kdlser
#   file         : cli_types.py
#   file_relpath : src/kdlser/cli/cli_types.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Shared CLI parameter types for kdlser.

Defines the input formats understood by ``kdlser encode`` and a reusable Click
parameter type that converts case-insensitive strings to members of a
string-valued `Enum` (used for ``--input-format`` and ``--map-format``).
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Generic, Iterable, NoReturn, Protocol, TypeVar, cast

import click

if TYPE_CHECKING:
    from click.shell_completion import CompletionItem as ClickCompletionItem

    class ParamTypeBase(Protocol):
        """Typed base to avoid subclassing Any when Click lacks stubs."""

        name: str

else:
    # At runtime, subclass the real Click type
    ParamTypeBase = click.ParamType  # type: ignore[assignment]

# Type variable bounded to Enum for generic EnumParam
E = TypeVar("E", bound=Enum)


class InputFormat(str, Enum):
    """Document formats accepted by ``kdlser encode``.

    Attributes:
        AUTO: Pick by file suffix (``.toml`` → TOML, anything else → JSON).
        JSON: JSON document.
        TOML: TOML document.
    """

    AUTO = "auto"
    JSON = "json"
    TOML = "toml"


class EnumChoiceParam(ParamTypeBase, Generic[E]):
    """A Click parameter type that converts a string to a member of a given Enum."""

    enum_cls: type[E]
    name: str
    choices: list[str]

    def __init__(self, enum_cls: type[E]) -> None:
        self.enum_cls = enum_cls
        self.name = self.enum_cls.__name__.lower()
        # Assume the enum exposes string-valued members (e.g., MapFormat)
        self.choices = [cast("str", getattr(e, "value", str(e))) for e in self.enum_cls]

    def _fail_noreturn(
        self,
        message: str,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> NoReturn:
        """Raise a BadParameter with a NoReturn signature (clear to type checkers)."""
        raise click.BadParameter(message, param=param, ctx=ctx)

    def convert(
        self,
        value: str | E | None,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> E | None:
        """Converts a string to a member of the Enum."""
        if value is None or isinstance(value, self.enum_cls):
            return value

        # Case-insensitive lookup by the enum's string value
        lookup: dict[str, E] = {
            cast("str", getattr(choice, "value", str(choice))).lower(): choice
            for choice in cast("Iterable[E]", self.enum_cls)
        }

        key = str(value).lower()
        if key in lookup:
            return lookup[key]

        self._fail_noreturn(
            f"Invalid value '{value}'. Must be one of: {', '.join(self.choices)}",
            param,
            ctx,
        )

    def shell_complete(
        self,
        ctx: click.Context,  # pylint: disable=unused-argument
        param: click.Parameter,  # pylint: disable=unused-argument
        incomplete: str,
    ) -> list[ClickCompletionItem]:
        """Tab completion for Click.

        Bash: `eval "$(_KDLSER_COMPLETE=bash_source kdlser)"`
        Zsh: `eval "$(_KDLSER_COMPLETE=zsh_source kdlser)"`
        """
        from click.shell_completion import (
            CompletionItem as RuntimeCompletionItem,
        )

        prefix = (incomplete or "").lower()
        items: list[ClickCompletionItem] = []
        for e in cast("Iterable[E]", self.enum_cls):
            val = str(getattr(e, "value", e))
            if val.lower().startswith(prefix):
                items.append(RuntimeCompletionItem(val))
        return items

    def __repr__(self) -> str:
        """Return a string representation."""
        return f"EnumParam({self.enum_cls.__name__})"
