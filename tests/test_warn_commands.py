"""
Autumn Moderation Bot - Warn Command Tests
==========================================

Tests for /warn, /warnings and /unwarn.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from autumn.commands.moderation_helpers import STORAGE_FAILURE_MESSAGE
from autumn.commands.warn.cog import WarnCog
from autumn.core.database import StorageError

from conftest import BOT_USER_ID, FIXED_NOW, GUILD_ID, MODERATOR_ID, TARGET_ID, sent_content, sent_embed


class TestWarnCommand:
    """Tests for /warn."""

    @pytest.mark.asyncio
    async def test_warn_records_everything(self, mock_bot, mock_interaction, mock_discord_user):
        cog = WarnCog(mock_bot)

        await cog.warn.callback(cog, mock_interaction, mock_discord_user, "  spamming  ")

        warnings = await mock_bot.db.list_warnings(GUILD_ID, TARGET_ID)
        assert [w.reason for w in warnings] == ["spamming"]
        assert warnings[0].moderator_id == MODERATOR_ID

        case = await mock_bot.db.get_case_by_label(GUILD_ID, "W", 1)
        assert case.action == "warn"
        assert case.reason == "spamming"

        embed = sent_embed(mock_interaction)
        assert embed.author.name == "Test User has been warned #1"
        assert embed.footer.text == "#W1"

        mock_bot.sink.publish_case.assert_awaited_once()
        mock_bot.sink.send_dm.assert_awaited_once_with(mock_discord_user, GUILD_ID, "warned", "spamming", None)
        mock_bot.escalation.check_and_escalate.assert_awaited_once_with(GUILD_ID, mock_discord_user, BOT_USER_ID)

    @pytest.mark.asyncio
    async def test_warn_number_counts_up(self, mock_bot, mock_interaction, mock_discord_user):
        cog = WarnCog(mock_bot)

        await cog.warn.callback(cog, mock_interaction, mock_discord_user, None)
        await cog.warn.callback(cog, mock_interaction, mock_discord_user, None)

        embed = mock_interaction.response.send_message.call_args.kwargs["embed"]
        assert embed.author.name == "Test User has been warned #2"
        assert (await mock_bot.db.list_warnings(GUILD_ID, TARGET_ID))[1].reason == "No reason provided"

    @pytest.mark.asyncio
    async def test_cannot_warn_self(self, mock_bot, mock_interaction, mock_moderator):
        cog = WarnCog(mock_bot)

        await cog.warn.callback(cog, mock_interaction, mock_moderator, "x")

        assert sent_content(mock_interaction) == "You can't warn yourself."
        assert await mock_bot.db.list_warnings(GUILD_ID, MODERATOR_ID) == []

    @pytest.mark.asyncio
    async def test_cannot_warn_bots(self, mock_bot, mock_interaction, mock_discord_user):
        mock_discord_user.bot = True
        cog = WarnCog(mock_bot)

        await cog.warn.callback(cog, mock_interaction, mock_discord_user, "x")

        assert sent_content(mock_interaction) == "You can't use moderation actions on bots or application accounts."
        mock_bot.escalation.check_and_escalate.assert_not_called()

    @pytest.mark.asyncio
    async def test_storage_failure(self, mock_bot, mock_interaction, mock_discord_user):
        mock_bot.db.record_warning = AsyncMock(side_effect=StorageError("db down"))
        cog = WarnCog(mock_bot)

        await cog.warn.callback(cog, mock_interaction, mock_discord_user, "x")

        assert sent_content(mock_interaction) == STORAGE_FAILURE_MESSAGE
        assert mock_interaction.response.send_message.call_args.kwargs["ephemeral"] is True
        mock_bot.sink.send_dm.assert_not_called()

    @pytest.mark.asyncio
    async def test_case_failure_still_warns(self, mock_bot, mock_interaction, mock_discord_user):
        """A failed case write does not undo the stored warning."""
        mock_bot.db.create_case = AsyncMock(side_effect=StorageError("disk full"))
        cog = WarnCog(mock_bot)

        await cog.warn.callback(cog, mock_interaction, mock_discord_user, "x")

        assert len(await mock_bot.db.list_warnings(GUILD_ID, TARGET_ID)) == 1
        assert sent_embed(mock_interaction).footer.text is None
        mock_bot.escalation.check_and_escalate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_replies_via_followup_when_deferred(self, mock_bot, mock_interaction, mock_discord_user):
        mock_interaction.response.is_done = MagicMock(return_value=True)
        cog = WarnCog(mock_bot)

        await cog.warn.callback(cog, mock_interaction, mock_discord_user, "x")

        mock_interaction.followup.send.assert_awaited_once()
        mock_interaction.response.send_message.assert_not_called()


class TestWarningsCommand:
    """Tests for /warnings."""

    @pytest.mark.asyncio
    async def test_lists_newest_first_with_history_numbers(self, mock_bot, mock_interaction, mock_discord_user):
        db = mock_bot.db
        db.now = lambda: FIXED_NOW - 10 * 86400
        await db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "old one")
        db.now = lambda: FIXED_NOW
        await db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "new one")
        cog = WarnCog(mock_bot)

        await cog.warnings.callback(cog, mock_interaction, mock_discord_user, None)

        embed = sent_embed(mock_interaction)
        assert embed.title == "Warnings for Test User"
        assert "Total warnings in all time: **2**" in embed.description
        assert embed.description.index("**#2**") < embed.description.index("**#1**")
        assert mock_interaction.response.send_message.call_args.kwargs["ephemeral"] is True

    @pytest.mark.asyncio
    async def test_day_window_keeps_full_numbers(self, mock_bot, mock_interaction, mock_discord_user):
        db = mock_bot.db
        db.now = lambda: FIXED_NOW - 10 * 86400
        await db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "old one")
        db.now = lambda: FIXED_NOW
        await db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "new one")
        cog = WarnCog(mock_bot)

        await cog.warnings.callback(cog, mock_interaction, mock_discord_user, 7)

        description = sent_embed(mock_interaction).description
        assert "Total warnings in last 7 day(s): **1**" in description
        assert "**#2**" in description
        assert "**#1**" not in description

    @pytest.mark.asyncio
    async def test_no_warnings(self, mock_bot, mock_interaction, mock_discord_user):
        cog = WarnCog(mock_bot)

        await cog.warnings.callback(cog, mock_interaction, mock_discord_user, None)

        assert "**0**" in sent_embed(mock_interaction).description


class TestUnwarnCommand:
    """Tests for /unwarn."""

    @pytest.mark.asyncio
    async def test_unwarn_by_number(self, mock_bot, mock_interaction, mock_discord_user):
        for reason in ("a", "b"):
            await mock_bot.db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, reason)
        cog = WarnCog(mock_bot)

        await cog.unwarn.callback(cog, mock_interaction, mock_discord_user, "1", None)

        assert sent_content(mock_interaction) == "Removed warning #1 for Test User. (#UW1)"
        assert [w.reason for w in await mock_bot.db.list_warnings(GUILD_ID, TARGET_ID)] == ["b"]

        case = await mock_bot.db.get_case_by_label(GUILD_ID, "UW", 1)
        assert case.reason == "Removed warning #1"
        assert case.status == "completed"

    @pytest.mark.asyncio
    async def test_unwarn_all(self, mock_bot, mock_interaction, mock_discord_user):
        for _ in range(3):
            await mock_bot.db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "x")
        cog = WarnCog(mock_bot)

        await cog.unwarn.callback(cog, mock_interaction, mock_discord_user, "ALL", "appeal accepted")

        assert sent_content(mock_interaction) == "Removed 3 warning(s) for Test User. (#UWA1)"
        case = await mock_bot.db.get_case_by_label(GUILD_ID, "UWA", 1)
        assert case.reason == "appeal accepted"

    @pytest.mark.asyncio
    async def test_unwarn_all_with_none(self, mock_bot, mock_interaction, mock_discord_user):
        cog = WarnCog(mock_bot)

        await cog.unwarn.callback(cog, mock_interaction, mock_discord_user, "all", None)

        assert sent_content(mock_interaction) == "Test User has no warnings."
        assert await mock_bot.db.list_recent_cases(GUILD_ID) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("selector,message", [
        ("abc", "Selector must be a warning number or 'all'."),
        ("\u00b2", "Selector must be a warning number or 'all'."),
        ("-1", "Selector must be a warning number or 'all'."),
        ("0", "Warning number must be 1 or greater."),
        ("5", "Warning #5 was not found for Test User."),
        ("99999999999999999999", "Warning #99999999999999999999 was not found for Test User."),
    ])
    async def test_bad_selectors(self, mock_bot, mock_interaction, mock_discord_user, selector, message):
        cog = WarnCog(mock_bot)

        await cog.unwarn.callback(cog, mock_interaction, mock_discord_user, selector, None)

        assert sent_content(mock_interaction) == message
        assert await mock_bot.db.list_recent_cases(GUILD_ID) == []
