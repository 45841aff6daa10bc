"""
Autumn Moderation Bot - Settings Command Tests
==============================================

Tests for /escalation, /modlogchannel and /wordfilter.
"""

from unittest.mock import MagicMock

import pytest

from autumn.commands.settings.cog import INVALID_DURATION_MESSAGE, SettingsCog, duration_autocomplete
from autumn.core.database import PRESET_WORDS

from conftest import GUILD_ID, sent_content, sent_embed


def _choice(name, value):
    choice = MagicMock()
    choice.name = name
    choice.value = value
    return choice


class TestEscalationSettings:
    """Tests for /escalation."""

    @pytest.mark.asyncio
    async def test_show_defaults(self, mock_bot, mock_interaction):
        cog = SettingsCog(mock_bot)

        await cog.escalation_show.callback(cog, mock_interaction)

        embed = sent_embed(mock_interaction)
        fields = {f.name: f.value for f in embed.fields}
        assert fields["Status"] == "Disabled"
        assert fields["Warn Threshold"] == "`3`"
        assert fields["Warn Window"] == "1d"
        assert fields["Timeout Window"] == "7d"

    @pytest.mark.asyncio
    async def test_enable_and_disable(self, mock_bot, mock_interaction):
        cog = SettingsCog(mock_bot)

        await cog.escalation_enable.callback(cog, mock_interaction)
        assert sent_content(mock_interaction) == "Escalation enabled."
        assert (await mock_bot.db.get_escalation_config(GUILD_ID)).enabled is True

        await cog.escalation_disable.callback(cog, mock_interaction)
        assert sent_content(mock_interaction) == "Escalation disabled."
        assert await mock_bot.db.get_escalation_if_enabled(GUILD_ID) is None

    @pytest.mark.asyncio
    async def test_threshold(self, mock_bot, mock_interaction):
        cog = SettingsCog(mock_bot)

        await cog.escalation_threshold.callback(cog, mock_interaction, 5)

        assert sent_content(mock_interaction) == "Warn threshold set to 5."
        assert (await mock_bot.db.get_escalation_config(GUILD_ID)).warn_threshold == 5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, 101])
    async def test_threshold_out_of_range(self, mock_bot, mock_interaction, count):
        cog = SettingsCog(mock_bot)

        await cog.escalation_threshold.callback(cog, mock_interaction, count)

        assert sent_content(mock_interaction) == "Threshold must be between 1 and 100."
        assert await mock_bot.db.get_escalation_config(GUILD_ID) is None

    @pytest.mark.asyncio
    async def test_windows(self, mock_bot, mock_interaction):
        cog = SettingsCog(mock_bot)

        await cog.escalation_warnwindow.callback(cog, mock_interaction, "12h")
        assert sent_content(mock_interaction) == "Warn window set to 12h."

        await cog.escalation_timeoutwindow.callback(cog, mock_interaction, "30d")
        assert sent_content(mock_interaction) == "Timeout window set to 30d."

        config = await mock_bot.db.get_escalation_config(GUILD_ID)
        assert config.warn_window_seconds == 43200
        assert config.timeout_window_seconds == 2592000

    @pytest.mark.asyncio
    async def test_invalid_window(self, mock_bot, mock_interaction):
        cog = SettingsCog(mock_bot)

        await cog.escalation_warnwindow.callback(cog, mock_interaction, "forever")

        assert sent_content(mock_interaction) == INVALID_DURATION_MESSAGE


class TestModlogChannelSettings:
    """Tests for /modlogchannel."""

    @pytest.mark.asyncio
    async def test_set_and_clear(self, mock_bot, mock_interaction):
        channel = MagicMock()
        channel.id = 777
        channel.mention = "<#777>"
        cog = SettingsCog(mock_bot)

        await cog.modlogchannel_set.callback(cog, mock_interaction, channel)
        assert sent_content(mock_interaction) == "Moderation logs will be posted in <#777>."
        assert await mock_bot.db.get_modlog_channel_id(GUILD_ID) == 777

        await cog.modlogchannel_clear.callback(cog, mock_interaction)
        assert sent_content(mock_interaction) == "Moderation log channel cleared."
        assert await mock_bot.db.get_modlog_channel_id(GUILD_ID) is None


class TestWordFilterSettings:
    """Tests for /wordfilter."""

    @pytest.mark.asyncio
    async def test_enable_and_action(self, mock_bot, mock_interaction):
        cog = SettingsCog(mock_bot)

        await cog.wordfilter_enable.callback(cog, mock_interaction)
        await cog.wordfilter_action.callback(cog, mock_interaction, _choice("Warn, Delete & Log", "warn_and_log"))

        assert sent_content(mock_interaction) == "Word filter action set to **Warn, Delete & Log**."
        config = await mock_bot.db.get_word_filter_if_enabled(GUILD_ID)
        assert config.action == "warn_and_log"

    @pytest.mark.asyncio
    async def test_add_word(self, mock_bot, mock_interaction):
        cog = SettingsCog(mock_bot)

        await cog.wordfilter_add.callback(cog, mock_interaction, "  BadWord ")
        assert sent_content(mock_interaction) == "Added `badword` to the filter."

        await cog.wordfilter_add.callback(cog, mock_interaction, "badword")
        assert sent_content(mock_interaction) == "`badword` is already filtered."

        assert await mock_bot.db.get_filter_words(GUILD_ID) == ["badword"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("word", ["two words", "bad-word", "", "!!!"])
    async def test_add_rejects_non_words(self, mock_bot, mock_interaction, word):
        cog = SettingsCog(mock_bot)

        await cog.wordfilter_add.callback(cog, mock_interaction, word)

        assert sent_content(mock_interaction) == "Filter words must be a single word of letters and numbers."

    @pytest.mark.asyncio
    async def test_remove_word(self, mock_bot, mock_interaction):
        await mock_bot.db.add_filter_word(GUILD_ID, "badword")
        cog = SettingsCog(mock_bot)

        await cog.wordfilter_remove.callback(cog, mock_interaction, "BADWORD")
        assert sent_content(mock_interaction) == "Removed `badword` from the filter."

        await cog.wordfilter_remove.callback(cog, mock_interaction, "badword")
        assert sent_content(mock_interaction) == "`badword` is not in the filter."

    @pytest.mark.asyncio
    async def test_preset(self, mock_bot, mock_interaction):
        cog = SettingsCog(mock_bot)

        await cog.wordfilter_preset.callback(cog, mock_interaction)

        assert sent_content(mock_interaction) == f"Loaded preset list: {len(PRESET_WORDS)} new word(s) added."

    @pytest.mark.asyncio
    async def test_show(self, mock_bot, mock_interaction):
        await mock_bot.db.add_filter_word(GUILD_ID, "badword")
        cog = SettingsCog(mock_bot)

        await cog.wordfilter_show.callback(cog, mock_interaction)

        fields = {f.name: f.value for f in sent_embed(mock_interaction).fields}
        assert fields["Status"] == "Disabled"
        assert fields["Action"] == "Delete & Log"
        assert fields["Words"] == "`1`"
        assert fields["List"] == "||badword||"


class TestDurationAutocomplete:
    """Tests for the window duration autocomplete."""

    @pytest.mark.asyncio
    async def test_empty_input_lists_presets(self, mock_interaction):
        choices = await duration_autocomplete(mock_interaction, "")
        assert [c.value for c in choices] == ["1h", "6h", "12h", "1d", "3d", "7d", "30d"]

    @pytest.mark.asyncio
    async def test_typed_value_leads(self, mock_interaction):
        choices = await duration_autocomplete(mock_interaction, "2D")
        assert choices[0].name == "2d"
        assert choices[0].value == "2d"

    @pytest.mark.asyncio
    async def test_matches_presets(self, mock_interaction):
        choices = await duration_autocomplete(mock_interaction, "day")
        assert {c.value for c in choices} == {"1d", "3d", "7d", "30d"}
