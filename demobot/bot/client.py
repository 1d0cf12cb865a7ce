"""
DemoBot — discord.py client for the demo.

Manages the bot lifecycle:
- Connects with the default (unprivileged) intents plus message content
- Posts an optional startup message and registers slash commands on READY
  (registration needs the application id, which is only known after identify)
- Routes interactions to the command dispatcher
- Answers prefix commands in ordinary messages
"""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
import discord

from demobot.bot.catalog import build_catalog
from demobot.bot.dispatch import CommandDispatcher
from demobot.bot.prefix import PrefixCommands
from demobot.commands import CommandCatalog
from demobot.config.logging import TRACE, get_logger
from demobot.config.settings import Settings
from demobot.errors import NotReady, RegistrationFailed

logger = get_logger(__name__)

STARTUP_MESSAGE = "Hello world!"


class DemoBot(discord.Client):
    """
    Discord client that owns the command catalog for its lifetime.

    Args:
        settings: Full application settings
        catalog: Commands to register and dispatch (defaults to the demo catalog)
    """

    def __init__(self, settings: Settings, catalog: CommandCatalog | None = None) -> None:
        intents = discord.Intents.default()
        intents.message_content = True  # Required to read prefix commands
        super().__init__(intents=intents)
        self.settings = settings
        self.catalog = catalog if catalog is not None else build_catalog()
        self.dispatcher = CommandDispatcher(self.catalog)
        self.prefix_commands = PrefixCommands(settings.bot.message_command_prefix)
        self._ready_seen = False
        self._commands_registered = False
        self._startup_message_sent = False

    async def on_ready(self) -> None:
        """Called when the bot has identified; may fire again after reconnects."""
        self._ready_seen = True
        logger.info(
            "Logged in!",
            extra={"metadata": {"user.id": self.user.id, "user.name": self.user.name}},
        )

        await self.send_startup_message()

        if self._commands_registered:
            return
        guild_id = self.settings.bot.command_guild_id
        try:
            logger.log(TRACE, "Registering interactions...")
            await self.register_commands(self.catalog, guild_id=guild_id)
        except (NotReady, RegistrationFailed) as e:
            logger.error(
                "Failed to register interactions",
                extra={"metadata": {"error": str(e)}},
            )
            return
        self._commands_registered = True
        if guild_id is not None:
            logger.info(f"Registered interactions in guild {guild_id} (instant)")
        else:
            logger.info("Registered interactions globally (may take a while to propagate)")

    async def on_message(self, message: discord.Message) -> None:
        await self.prefix_commands.handle(message)

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        await self.dispatcher.dispatch(interaction)

    async def close(self) -> None:
        logger.info("Shutting down...")
        await super().close()

    async def register_commands(
        self, catalog: CommandCatalog, guild_id: int | None = None
    ) -> list[dict[str, Any]]:
        """
        Upload ``catalog``, replacing the commands registered in that scope.

        Bulk overwrite makes this idempotent: submitting the same catalog
        twice leaves the same commands registered.

        Args:
            catalog: Commands to register
            guild_id: Register in this guild only; global when None

        Returns:
            The commands as Discord stored them ([] for an empty catalog)

        Raises:
            NotReady: Called before the READY event
            RegistrationFailed: Transport failure or Discord rejected the payload
        """
        application_id = self.application_id
        if not self._ready_seen or application_id is None:
            raise NotReady("Commands can only be registered after the READY event")

        payload = catalog.to_payload()
        if not payload:
            logger.info("Command catalog is empty; nothing to register")
            return []

        scope = f"guild {guild_id}" if guild_id is not None else "global"
        logger.debug(f"Registering {len(payload)} command(s) ({scope}): {', '.join(catalog.names)}")
        try:
            if guild_id is not None:
                return await self.http.bulk_upsert_guild_commands(application_id, guild_id, payload)
            return await self.http.bulk_upsert_global_commands(application_id, payload)
        except discord.DiscordServerError as e:
            raise RegistrationFailed("transport", e) from e
        except discord.HTTPException as e:
            raise RegistrationFailed("platform", e) from e
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise RegistrationFailed("transport", e) from e

    async def send_startup_message(self) -> None:
        """Post the startup message to TEST_CHANNEL_ID once per process, if configured."""
        channel_id = self.settings.bot.test_channel_id
        if channel_id is None or self._startup_message_sent:
            return
        try:
            channel = self.get_channel(channel_id) or await self.fetch_channel(channel_id)
            if not isinstance(channel, discord.abc.Messageable):
                logger.warning(f"Test channel {channel_id} can't receive messages")
                return
            await channel.send(STARTUP_MESSAGE)
            self._startup_message_sent = True
        except discord.HTTPException as e:
            logger.warning(
                "Failed to send startup message",
                extra={"metadata": {"channel.id": channel_id, "error": str(e)}},
            )
