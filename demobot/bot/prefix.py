"""
Prefix commands — the legacy "?ping" style text commands.

Messages starting with the configured prefix are split on whitespace; the
first token picks the command and the rest become its arguments.
"""

from __future__ import annotations

from typing import Awaitable, Callable, NamedTuple

import discord

from demobot.config.logging import get_logger

logger = get_logger(__name__)

UNKNOWN_PREFIX_COMMAND = "I don't recognise that command :("

PrefixHandler = Callable[[discord.Message, list[str]], Awaitable[None]]


class ParsedCommand(NamedTuple):
    name: str
    args: list[str]


def parse_prefix_command(content: str, prefix: str) -> ParsedCommand | None:
    """
    Split ``content`` into a command name and arguments.

    Returns None when the content doesn't start with ``prefix`` or nothing
    follows it.
    """
    if not content.startswith(prefix):
        return None
    tokens = content[len(prefix):].split()
    if not tokens:
        return None
    return ParsedCommand(tokens[0], tokens[1:])


async def _ping(message: discord.Message, args: list[str]) -> None:
    await message.reply("Pong!")


async def _test(message: discord.Message, args: list[str]) -> None:
    await message.reply("Testing a reply!")


DEFAULT_COMMANDS: dict[str, PrefixHandler] = {
    "ping": _ping,
    "test": _test,
}


class PrefixCommands:
    """
    Handles prefix commands in ordinary chat messages.

    Args:
        prefix: Prefix marking a message as a command (e.g. "?")
        commands: Command name → handler table
    """

    def __init__(self, prefix: str, commands: dict[str, PrefixHandler] | None = None) -> None:
        self.prefix = prefix
        self.commands = dict(DEFAULT_COMMANDS if commands is None else commands)

    async def handle(self, message: discord.Message) -> bool:
        """
        Reply to ``message`` if it is a prefix command.

        Returns:
            True if the message was treated as a command
        """
        if message.author.bot:
            return False
        parsed = parse_prefix_command(message.content, self.prefix)
        if parsed is None:
            return False

        handler = self.commands.get(parsed.name)
        if handler is None:
            logger.debug(f"Unknown prefix command {parsed.name!r}")
            await message.reply(UNKNOWN_PREFIX_COMMAND)
            return True

        logger.debug(f"Running prefix command {parsed.name!r} with args {parsed.args}")
        await handler(message, parsed.args)
        return True
