"""
CommandCatalog — the full set of slash commands the bot registers.

The catalog is an immutable, name-unique, ordered collection. It validates
that every command can reach a handler and serializes to the list payload
that Discord's bulk-overwrite endpoints take.
"""

from __future__ import annotations

from typing import Any, Iterator

from demobot.commands.command import Command
from demobot.commands.options import check_unique
from demobot.errors import BadSchema

# Discord's limit on chat-input commands per scope
MAX_COMMANDS = 100


class CommandCatalog:
    """
    Ordered collection of commands, keyed by name.

    Args:
        *commands: Commands in registration order
        require_handlers: Reject commands that can't reach a handler. Only
            catalogs parsed from a payload (which never carries handlers)
            should turn this off.
    """

    def __init__(self, *commands: Command, require_handlers: bool = True) -> None:
        for command in commands:
            if not isinstance(command, Command):
                raise BadSchema(f"Catalog entries must be commands, got {command!r}")
        if len(commands) > MAX_COMMANDS:
            raise BadSchema(f"At most {MAX_COMMANDS} commands can be registered")
        check_unique((command.name for command in commands), "catalog", "command")
        if require_handlers:
            for command in commands:
                command.check_handlers()
        self._commands: tuple[Command, ...] = commands
        self._by_name = {command.name: command for command in commands}

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __repr__(self) -> str:
        return f"CommandCatalog({', '.join(self._by_name)})"

    def get(self, name: str) -> Command | None:
        return self._by_name.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._by_name)

    def to_payload(self) -> list[dict[str, Any]]:
        return [command.to_payload() for command in self._commands]

    @classmethod
    def from_payload(cls, data: list[dict[str, Any]]) -> CommandCatalog:
        """Parse a bulk-overwrite payload back into a (handler-less) catalog."""
        return cls(*(Command.from_payload(entry) for entry in data), require_handlers=False)
