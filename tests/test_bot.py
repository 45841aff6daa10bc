"""
Autumn Moderation Bot - Bot and Event Tests
===========================================

Tests for bot wiring, the app command error handler and message routing.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from discord import app_commands

from autumn.bot import AutumnBot
from autumn.commands import COMMAND_COGS
from autumn.core.config import Config
from autumn.events import EVENT_COGS
from autumn.events.messages import MessageEvents
from autumn.services import DiscordModerationSink, EscalationService, WordFilterService

from conftest import BOT_USER_ID, GUILD_ID


@pytest.fixture
def bot(test_db):
    return AutumnBot(Config(discord_token="test-token"), db=test_db)


class TestAutumnBot:
    """Tests for AutumnBot construction and error handling."""

    @pytest.mark.asyncio
    async def test_services_wired(self, bot, test_db):
        assert bot.db is test_db
        assert isinstance(bot.sink, DiscordModerationSink)
        assert isinstance(bot.escalation, EscalationService)
        assert isinstance(bot.word_filter, WordFilterService)
        assert bot.escalation.sink is bot.sink
        assert bot.word_filter.escalation is bot.escalation
        assert bot.intents.message_content is True
        assert bot.intents.members is True

    def test_extension_lists(self):
        assert COMMAND_COGS == [
            "autumn.commands.warn",
            "autumn.commands.cases",
            "autumn.commands.settings",
        ]
        assert EVENT_COGS == ["autumn.events.messages"]

    @pytest.mark.asyncio
    async def test_permission_error_reply(self, bot, mock_interaction):
        await bot.on_app_command_error(mock_interaction, app_commands.CheckFailure())

        mock_interaction.response.send_message.assert_awaited_once_with(
            "You don't have permission to use this command.", ephemeral=True,
        )

    @pytest.mark.asyncio
    async def test_unexpected_error_reply(self, bot, mock_interaction):
        mock_interaction.response.is_done = MagicMock(return_value=True)
        mock_interaction.command.qualified_name = "warn"

        await bot.on_app_command_error(mock_interaction, app_commands.AppCommandError("boom"))

        mock_interaction.followup.send.assert_awaited_once_with(
            "An unexpected error occurred.", ephemeral=True,
        )


class TestMessageEvents:
    """Tests for on_message routing."""

    def _bot(self):
        bot = MagicMock()
        bot.user.id = BOT_USER_ID
        bot.word_filter.handle_message = AsyncMock(return_value=None)
        return bot

    def _message(self, bot_author=False, guild=True):
        message = MagicMock()
        message.author.bot = bot_author
        message.guild = MagicMock(id=GUILD_ID) if guild else None
        return message

    @pytest.mark.asyncio
    async def test_routes_guild_messages(self):
        bot = self._bot()
        message = self._message()

        await MessageEvents(bot).on_message(message)

        bot.word_filter.handle_message.assert_awaited_once_with(message, BOT_USER_ID)

    @pytest.mark.asyncio
    async def test_skips_dms_and_bots(self):
        bot = self._bot()
        events = MessageEvents(bot)

        await events.on_message(self._message(guild=False))
        await events.on_message(self._message(bot_author=True))

        bot.word_filter.handle_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_handler_errors_are_contained(self):
        bot = self._bot()
        bot.word_filter.handle_message = AsyncMock(side_effect=RuntimeError("boom"))

        await MessageEvents(bot).on_message(self._message())
