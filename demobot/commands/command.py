"""
Application commands and sub-commands.

A Command holds either options or sub-commands (never both). Children are
passed positionally, so a catalog reads top-down like the commands look in
the Discord client:

    Command(
        "calculator", "Crunch some numbers",
        SubCommand("plus", "Add two numbers",
                   NumberOption("lhs", "First number", required=True),
                   NumberOption("rhs", "Second number", required=True)),
        handler=calculator,
    )

Building a command only constructs a value; nothing talks to Discord until
the catalog is registered.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field, model_validator

from demobot.commands.options import (
    MAX_OPTIONS,
    Option,
    OptionKind,
    check_description,
    check_name,
    check_options,
    check_unique,
    payload_field,
    payload_kind,
)
from demobot.errors import BadSchema

if TYPE_CHECKING:
    from demobot.bot.interaction import InteractionContext

Handler = Callable[["InteractionContext"], Awaitable[None]]

# Discord's application command type for slash (chat input) commands
CHAT_INPUT = 1


class SubCommand(BaseModel):
    """A sub-command: its own name, options and (optionally) handler."""

    name: str
    description: str
    options: tuple[Option, ...] = Field(default=())
    handler: Callable[..., Any] | None = Field(default=None, exclude=True)

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    def __init__(
        self,
        name: str,
        description: str,
        *options: Option,
        handler: Handler | None = None,
        **data: Any,
    ) -> None:
        for opt in options:
            if not isinstance(opt, Option):
                raise BadSchema(f"Sub-command {name!r} can only contain options, got {opt!r}")
        data["options"] = [*data.get("options", []), *options]
        super().__init__(name=name, description=description, handler=handler, **data)

    @model_validator(mode="after")
    def _validate(self) -> SubCommand:
        check_name(self.name, "sub-command")
        check_description(self.description, self.name)
        check_options(self.options, self.name)
        return self

    def option(self, name: str) -> Option | None:
        return next((opt for opt in self.options if opt.name == name), None)

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": int(OptionKind.SUB_COMMAND),
            "name": self.name,
            "description": self.description,
            "options": [opt.to_payload() for opt in self.options],
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> SubCommand:
        options = [Option.from_payload(opt) for opt in data.get("options") or []]
        return cls(payload_field(data, "name"), payload_field(data, "description"), *options)


class Command(BaseModel):
    """
    A top-level slash command.

    Either a leaf command (options + handler) or a parent of sub-commands.
    When a command has sub-commands, the invoked sub-command's handler runs
    if it has one; otherwise the command's own handler runs and can inspect
    which sub-command was chosen via ``InteractionContext.sub_option``.
    """

    name: str
    description: str
    options: tuple[Option, ...] = Field(default=())
    subcommands: tuple[SubCommand, ...] = Field(default=())
    handler: Callable[..., Any] | None = Field(default=None, exclude=True)

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    def __init__(
        self,
        name: str,
        description: str,
        *children: Option | SubCommand,
        handler: Handler | None = None,
        **data: Any,
    ) -> None:
        options = list(data.pop("options", []))
        subcommands = list(data.pop("subcommands", []))
        for child in children:
            if isinstance(child, SubCommand):
                subcommands.append(child)
            elif isinstance(child, Option):
                options.append(child)
            else:
                raise BadSchema(f"Command {name!r} got an unsupported child {child!r}")
        super().__init__(
            name=name,
            description=description,
            options=options,
            subcommands=subcommands,
            handler=handler,
            **data,
        )

    @model_validator(mode="after")
    def _validate(self) -> Command:
        check_name(self.name, "command")
        check_description(self.description, self.name)
        if self.options and self.subcommands:
            raise BadSchema(
                f"Command {self.name!r} mixes options with sub-commands; use one or the other"
            )
        if len(self.subcommands) > MAX_OPTIONS:
            raise BadSchema(f"{self.name!r} has more than {MAX_OPTIONS} sub-commands")
        check_unique((sub.name for sub in self.subcommands), self.name, "sub-command")
        check_options(self.options, self.name)
        return self

    def check_handlers(self) -> None:
        """
        Ensure every invocation path of this command reaches a handler.

        Raises:
            BadSchema: A leaf command without a handler, or sub-commands that
                have neither their own handler nor a command-level fallback
        """
        if self.handler is not None:
            return
        if not self.subcommands:
            raise BadSchema(f"Command {self.name!r} has no handler")
        missing = [sub.name for sub in self.subcommands if sub.handler is None]
        if missing:
            raise BadSchema(
                f"Command {self.name!r} has no handler and sub-command(s) "
                f"{', '.join(missing)} have none either"
            )

    def subcommand(self, name: str) -> SubCommand | None:
        return next((sub for sub in self.subcommands if sub.name == name), None)

    def option(self, name: str) -> Option | None:
        return next((opt for opt in self.options if opt.name == name), None)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to Discord's application command object."""
        if self.subcommands:
            options = [sub.to_payload() for sub in self.subcommands]
        else:
            options = [opt.to_payload() for opt in self.options]
        return {
            "type": CHAT_INPUT,
            "name": self.name,
            "description": self.description,
            "options": options,
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Command:
        """
        Parse a Discord application command object.

        Handlers are not part of the payload, so parsed commands have none.

        Raises:
            BadSchema: Unsupported command or option types, or missing keys
        """
        if data.get("type", CHAT_INPUT) != CHAT_INPUT:
            raise BadSchema(f"Command {data.get('name')!r} is not a slash command")

        children: list[Option | SubCommand] = []
        for entry in data.get("options") or []:
            kind = payload_kind(entry)
            if kind is OptionKind.SUB_COMMAND:
                children.append(SubCommand.from_payload(entry))
            elif kind is OptionKind.SUB_COMMAND_GROUP:
                raise BadSchema(f"Sub-command groups are not supported ({entry.get('name')!r})")
            else:
                children.append(Option.from_payload(entry))
        return cls(payload_field(data, "name"), payload_field(data, "description"), *children)
