"""
Tests for CommandDispatcher.

Covers:
- Routing to exactly the matching handler (command vs sub-command handlers)
- Unknown commands and non-command interactions
- Failure containment and the generic failure response
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from demobot.bot.dispatch import (
    HANDLER_FAILED_MESSAGE,
    UNKNOWN_COMMAND_MESSAGE,
    CommandDispatcher,
)
from demobot.commands import Command, CommandCatalog, NumberOption, StringOption, SubCommand


def _make_interaction(data: dict, kind=discord.InteractionType.application_command) -> MagicMock:
    interaction = MagicMock(spec=discord.Interaction)
    interaction.type = kind
    interaction.data = data
    interaction.id = 99
    interaction.user = MagicMock()
    interaction.user.id = 7
    interaction.response = MagicMock()
    interaction.response.send_message = AsyncMock()
    interaction.response.defer = AsyncMock()
    interaction.edit_original_response = AsyncMock()
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    return interaction


def _catalog(**handlers) -> CommandCatalog:
    return CommandCatalog(
        Command("greet", "Greet", StringOption("name", "Name"), handler=handlers["greet"]),
        Command(
            "math", "Math",
            SubCommand("double", "Double it", NumberOption("x", "Value", required=True),
                       handler=handlers.get("double")),
            SubCommand("half", "Halve it", NumberOption("x", "Value", required=True)),
            handler=handlers["math"],
        ),
    )


class TestRouting:
    @pytest.mark.asyncio
    async def test_routes_to_matching_command_only(self):
        greet, math_ = AsyncMock(), AsyncMock()
        dispatcher = CommandDispatcher(_catalog(greet=greet, math=math_))

        ctx = await dispatcher.dispatch(_make_interaction({"name": "greet"}))

        greet.assert_awaited_once_with(ctx)
        math_.assert_not_called()

    @pytest.mark.asyncio
    async def test_subcommand_handler_takes_precedence(self):
        greet, math_, double = AsyncMock(), AsyncMock(), AsyncMock()
        dispatcher = CommandDispatcher(_catalog(greet=greet, math=math_, double=double))

        ctx = await dispatcher.dispatch(_make_interaction({
            "name": "math",
            "options": [{"name": "double", "type": 1, "options": [{"name": "x", "type": 10, "value": 2}]}],
        }))

        double.assert_awaited_once_with(ctx)
        math_.assert_not_called()
        assert ctx.sub_option("double").get("x") == 2.0

    @pytest.mark.asyncio
    async def test_falls_back_to_command_handler(self):
        greet, math_, double = AsyncMock(), AsyncMock(), AsyncMock()
        dispatcher = CommandDispatcher(_catalog(greet=greet, math=math_, double=double))

        await dispatcher.dispatch(_make_interaction({
            "name": "math",
            "options": [{"name": "half", "type": 1, "options": [{"name": "x", "type": 10, "value": 2}]}],
        }))

        math_.assert_awaited_once()
        double.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_subcommand_still_runs_handler(self):
        math_ = AsyncMock()
        dispatcher = CommandDispatcher(_catalog(greet=AsyncMock(), math=math_))

        ctx = await dispatcher.dispatch(_make_interaction({"name": "math"}))

        math_.assert_awaited_once_with(ctx)
        assert ctx.sub_option("double") is None
        assert ctx.sub_option("half") is None


class TestUnknownAndIgnored:
    @pytest.mark.asyncio
    async def test_unknown_command_replies_and_warns(self, caplog):
        greet = AsyncMock()
        dispatcher = CommandDispatcher(_catalog(greet=greet, math=AsyncMock()))
        interaction = _make_interaction({"name": "nope"})

        with caplog.at_level("WARNING", logger="demobot"):
            result = await dispatcher.dispatch(interaction)

        assert result is None
        interaction.response.send_message.assert_awaited_once_with(UNKNOWN_COMMAND_MESSAGE, ephemeral=True)
        greet.assert_not_called()
        assert any("unknown command" in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_non_command_interactions_are_ignored(self):
        greet = AsyncMock()
        dispatcher = CommandDispatcher(_catalog(greet=greet, math=AsyncMock()))
        interaction = _make_interaction({"custom_id": "x"}, kind=discord.InteractionType.component)

        assert await dispatcher.dispatch(interaction) is None
        interaction.response.send_message.assert_not_called()


class TestFailures:
    @pytest.mark.asyncio
    async def test_handler_error_sends_generic_response(self):
        greet = AsyncMock(side_effect=RuntimeError("boom"))
        dispatcher = CommandDispatcher(_catalog(greet=greet, math=AsyncMock()))
        interaction = _make_interaction({"name": "greet"})

        await dispatcher.dispatch(interaction)

        interaction.response.send_message.assert_awaited_once_with(
            ephemeral=True, content=HANDLER_FAILED_MESSAGE
        )

    @pytest.mark.asyncio
    async def test_error_after_reply_sends_nothing_more(self):
        async def greet(ctx):
            await ctx.reply("Hi")
            raise RuntimeError("late failure")

        dispatcher = CommandDispatcher(_catalog(greet=greet, math=AsyncMock()))
        interaction = _make_interaction({"name": "greet"})

        await dispatcher.dispatch(interaction)

        interaction.response.send_message.assert_awaited_once_with(ephemeral=False, content="Hi")
        interaction.edit_original_response.assert_not_called()

    @pytest.mark.asyncio
    async def test_error_after_defer_edits_deferred_response(self):
        async def greet(ctx):
            await ctx.defer_reply()
            raise RuntimeError("slow failure")

        dispatcher = CommandDispatcher(_catalog(greet=greet, math=AsyncMock()))
        interaction = _make_interaction({"name": "greet"})

        await dispatcher.dispatch(interaction)

        interaction.edit_original_response.assert_awaited_once_with(content=HANDLER_FAILED_MESSAGE)

    @pytest.mark.asyncio
    async def test_double_reply_is_contained(self):
        async def greet(ctx):
            await ctx.reply("One")
            await ctx.reply("Two")

        dispatcher = CommandDispatcher(_catalog(greet=greet, math=AsyncMock()))
        interaction = _make_interaction({"name": "greet"})

        await dispatcher.dispatch(interaction)

        interaction.response.send_message.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_already_responded_interaction_is_contained(self, caplog):
        """A response sent outside the context makes the failure reply raise InteractionResponded."""
        greet = AsyncMock(side_effect=RuntimeError("boom"))
        dispatcher = CommandDispatcher(_catalog(greet=greet, math=AsyncMock()))
        interaction = _make_interaction({"name": "greet"})
        interaction.response.send_message.side_effect = discord.InteractionResponded(interaction)

        with caplog.at_level("WARNING", logger="demobot"):
            await dispatcher.dispatch(interaction)

        interaction.response.send_message.assert_awaited_once()
        assert any("Could not report failure of /greet" in r.getMessage() for r in caplog.records)
