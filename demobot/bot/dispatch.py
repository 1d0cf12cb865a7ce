"""
CommandDispatcher — routes application-command interactions to handlers.

For each interaction at most one handler runs. Failures inside a handler are
contained: they're logged and the user gets a generic error message if the
handler hadn't already answered.
"""

from __future__ import annotations

import discord

from demobot.bot.interaction import InteractionContext
from demobot.commands import CommandCatalog
from demobot.config.logging import TRACE, get_logger
from demobot.errors import HandlerError

logger = get_logger(__name__)

UNKNOWN_COMMAND_MESSAGE = "I don't recognise that command :("
HANDLER_FAILED_MESSAGE = "Something went wrong while running that command. Please try again."


class CommandDispatcher:
    """
    Dispatches interactions against an immutable command catalog.

    Args:
        catalog: The commands this bot registered
    """

    def __init__(self, catalog: CommandCatalog) -> None:
        self.catalog = catalog

    async def dispatch(self, interaction: discord.Interaction) -> InteractionContext | None:
        """
        Run the handler for one interaction.

        Returns:
            The context the handler ran with, or None if nothing ran
            (not a slash command, or an unknown one)
        """
        if interaction.type is not discord.InteractionType.application_command:
            return None

        data = interaction.data or {}
        name = data.get("name")
        command = self.catalog.get(name) if name else None
        if command is None:
            logger.warning(
                f"Received unknown command {name!r}",
                extra={"metadata": {"interaction.id": interaction.id}},
            )
            await interaction.response.send_message(UNKNOWN_COMMAND_MESSAGE, ephemeral=True)
            return None

        ctx = InteractionContext(interaction, command)
        sub = command.subcommand(ctx.subcommand_name) if ctx.subcommand_name else None
        handler = sub.handler if sub is not None and sub.handler is not None else command.handler
        if handler is None:
            # Only reachable for a sub-command missing from the schema
            logger.warning(f"No handler for /{ctx.path}")
            await ctx.reply(UNKNOWN_COMMAND_MESSAGE, ephemeral=True)
            return ctx

        logger.log(
            TRACE,
            f"Dispatching /{ctx.path}",
            extra={"metadata": {"interaction.id": interaction.id, "user.id": interaction.user.id}},
        )
        try:
            await handler(ctx)
        except Exception as e:
            error = HandlerError(ctx.path, e)
            logger.error(str(error), exc_info=e)
            await self._report_failure(ctx)
        return ctx

    async def _report_failure(self, ctx: InteractionContext) -> None:
        if ctx.finished:
            return
        try:
            await ctx.reply(HANDLER_FAILED_MESSAGE, ephemeral=True)
        except (discord.HTTPException, discord.InteractionResponded) as e:
            logger.warning(f"Could not report failure of /{ctx.path}: {e}")
