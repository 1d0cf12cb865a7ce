"""
Typed application-command options.

Each option kind has its own builder (StringOption, IntegerOption,
NumberOption, BooleanOption). Constraints can be given at construction time
or applied afterwards with chainable setters; both forms produce equal
options:

    >>> IntegerOption("age", "How old are you?", min=1)
    >>> IntegerOption("age", "How old are you?").min(1)

Options serialize to the shape Discord's application-command endpoints
accept, and parse back from it.
"""

from __future__ import annotations

import re
from enum import IntEnum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, model_validator

from demobot.errors import BadSchema

# Discord caps the number of options (or sub-commands) under one parent
MAX_OPTIONS = 25
MAX_DESCRIPTION_LENGTH = 100

_NAME_RE = re.compile(r"^[-_\w]{1,32}$")


class OptionKind(IntEnum):
    """Application-command option type codes as documented by Discord."""

    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11

    @property
    def is_numeric(self) -> bool:
        return self in (OptionKind.INTEGER, OptionKind.NUMBER)


def check_name(name: str, what: str) -> None:
    """Validate a command, sub-command or option name against Discord's rules."""
    if not isinstance(name, str) or not _NAME_RE.match(name) or name != name.lower():
        raise BadSchema(
            f"Invalid {what} name {name!r}: must be 1-32 lower-case letters, digits, '-' or '_'"
        )


def check_description(description: str, owner: str) -> None:
    if not description or len(description) > MAX_DESCRIPTION_LENGTH:
        raise BadSchema(
            f"Description of {owner!r} must be 1-{MAX_DESCRIPTION_LENGTH} characters"
        )


def check_unique(names: Iterable[str], parent: str, what: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise BadSchema(f"Duplicate {what} {name!r} in {parent!r}")
        seen.add(name)


def check_options(options: list[Option], parent: str) -> None:
    """
    Validate the option list of one command or sub-command.

    Raises:
        BadSchema: Duplicate names, too many options, or a required option
            declared after an optional one
    """
    if len(options) > MAX_OPTIONS:
        raise BadSchema(f"{parent!r} has {len(options)} options; at most {MAX_OPTIONS} allowed")
    check_unique((opt.name for opt in options), parent, "option")

    optional_seen: str | None = None
    for opt in options:
        opt.check()
        if not opt.required:
            optional_seen = optional_seen or opt.name
        elif optional_seen is not None:
            raise BadSchema(
                f"Required option {opt.name!r} of {parent!r} must come before "
                f"optional option {optional_seen!r}"
            )


class Option(BaseModel):
    """
    A typed parameter of a command or sub-command.

    Use the per-kind subclasses to build options; this base class carries the
    shared fields and the payload (de)serialization.
    """

    type: OptionKind = Field(description="Discord option type code")
    name: str = Field(description="Option name shown in the Discord client")
    description: str = Field(description="Help text shown next to the option")
    required: bool = Field(default=False, description="Whether the user must supply it")
    min_value: int | float | None = Field(default=None, description="Inclusive lower bound")
    max_value: int | float | None = Field(default=None, description="Inclusive upper bound")

    # Options are values: a catalog can't be changed behind its validation
    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _validate(self) -> Option:
        self.check()
        return self

    def check(self) -> None:
        """Validate this option on its own (parents also re-run it)."""
        check_name(self.name, "option")
        check_description(self.description, self.name)
        if self.type in (OptionKind.SUB_COMMAND, OptionKind.SUB_COMMAND_GROUP):
            raise BadSchema(f"Option {self.name!r} cannot have sub-command type {self.type.name}")

        bounds = [b for b in (self.min_value, self.max_value) if b is not None]
        if bounds and not self.type.is_numeric:
            raise BadSchema(f"Option {self.name!r} of type {self.type.name} cannot have min/max bounds")
        for bound in bounds:
            if isinstance(bound, bool) or (
                self.type is OptionKind.INTEGER and not isinstance(bound, int)
            ):
                raise BadSchema(f"Invalid bound {bound!r} for {self.type.name} option {self.name!r}")
        if len(bounds) == 2 and self.min_value > self.max_value:
            raise BadSchema(
                f"Option {self.name!r} has min {self.min_value} greater than max {self.max_value}"
            )

    # ------------------------------------------------------------------
    # Chainable constraint setters (each returns a validated copy)
    # ------------------------------------------------------------------

    def _with(self, **update: Any) -> Option:
        updated = self.model_copy(update=update)
        updated.check()
        return updated

    def mark_required(self, required: bool = True) -> Option:
        return self._with(required=required)

    def min(self, value: int | float) -> Option:
        return self._with(min_value=value)

    def max(self, value: int | float) -> Option:
        return self._with(max_value=value)

    # ------------------------------------------------------------------
    # Payload (de)serialization
    # ------------------------------------------------------------------

    def to_payload(self) -> dict[str, Any]:
        """Serialize to Discord's application-command option object."""
        return self.model_dump(mode="json", exclude_none=True)

    @staticmethod
    def from_payload(data: dict[str, Any]) -> Option:
        """
        Parse a Discord option object into the matching Option subclass.

        Raises:
            BadSchema: Unknown or unsupported type code, or a missing key
        """
        kind = payload_kind(data)
        builder = _BUILDERS.get(kind)
        if builder is None:
            raise BadSchema(f"Unsupported option type {kind.name} for {data.get('name')!r}")

        kwargs: dict[str, Any] = {"required": bool(data.get("required", False))}
        if kind.is_numeric:
            kwargs["min"] = data.get("min_value")
            kwargs["max"] = data.get("max_value")
        return builder(payload_field(data, "name"), payload_field(data, "description"), **kwargs)


def payload_field(data: dict[str, Any], key: str) -> Any:
    """Read a required key from a payload object, raising BadSchema if absent."""
    try:
        return data[key]
    except (KeyError, TypeError):
        raise BadSchema(f"Payload object {data!r} is missing {key!r}") from None


def payload_kind(data: dict[str, Any]) -> OptionKind:
    """Read an option object's type code, raising BadSchema if unknown."""
    code = payload_field(data, "type")
    try:
        return OptionKind(code)
    except ValueError:
        raise BadSchema(f"Unknown option type {code!r} for {data.get('name')!r}") from None


class StringOption(Option):
    """A free-text option."""

    def __init__(self, name: str, description: str, *, required: bool = False, **data: Any) -> None:
        super().__init__(
            type=OptionKind.STRING, name=name, description=description, required=required, **data
        )


class IntegerOption(Option):
    """A whole-number option with optional inclusive bounds."""

    def __init__(
        self,
        name: str,
        description: str,
        *,
        required: bool = False,
        min: int | None = None,
        max: int | None = None,
        **data: Any,
    ) -> None:
        super().__init__(
            type=OptionKind.INTEGER,
            name=name,
            description=description,
            required=required,
            min_value=min,
            max_value=max,
            **data,
        )


class NumberOption(Option):
    """A floating-point option with optional inclusive bounds."""

    def __init__(
        self,
        name: str,
        description: str,
        *,
        required: bool = False,
        min: int | float | None = None,
        max: int | float | None = None,
        **data: Any,
    ) -> None:
        super().__init__(
            type=OptionKind.NUMBER,
            name=name,
            description=description,
            required=required,
            min_value=min,
            max_value=max,
            **data,
        )


class BooleanOption(Option):
    """A true/false option."""

    def __init__(self, name: str, description: str, *, required: bool = False, **data: Any) -> None:
        super().__init__(
            type=OptionKind.BOOLEAN, name=name, description=description, required=required, **data
        )


_BUILDERS = {
    OptionKind.STRING: StringOption,
    OptionKind.INTEGER: IntegerOption,
    OptionKind.NUMBER: NumberOption,
    OptionKind.BOOLEAN: BooleanOption,
}
