"""
Autumn Moderation Bot - Formatting and Embed Tests
==================================================

Tests for case labels, display names and embed builders.
"""

import discord
import pytest

from autumn.core.config import EmbedColors
from autumn.core.database import CaseSummary
from autumn.utils.embeds import (
    build_action_embed,
    build_auto_timeout_embed,
    build_case_embed,
    build_moderation_dm,
    build_word_filter_embed,
    case_color,
    sanitize_mentions,
    word_filter_action_label,
)
from autumn.utils.formatting import (
    action_display_name,
    event_display_name,
    format_case_label,
    parse_case_label,
    truncate,
)


def _summary(action="warn", code="W", number=1, duration=None, reason="spam"):
    return CaseSummary(
        case_number=1,
        case_code=code,
        action_case_number=number,
        target_user_id=222,
        moderator_user_id=111,
        action=action,
        reason=reason,
        duration_seconds=duration,
        created_at=1_700_000_000,
    )


class TestCaseLabels:
    """Tests for format_case_label and parse_case_label."""

    def test_format(self):
        assert format_case_label("w", 12) == "W12"
        assert format_case_label("UWA", 3) == "UWA3"

    @pytest.mark.parametrize("raw,parsed", [
        ("W12", ("W", 12)),
        ("w12", ("W", 12)),
        ("  at3 ", ("AT", 3)),
        ("UWA1", ("UWA", 1)),
        ("wf007", ("WF", 7)),
    ])
    def test_parse_valid(self, raw, parsed):
        assert parse_case_label(raw) == parsed

    @pytest.mark.parametrize("raw", [
        None, "", "W", "12", "W0", "W-1", "W1a", "#W1", "W 1", "Ŵ1", "W\u00b2",
        "W9223372036854775808", "W99999999999999999999",
    ])
    def test_parse_invalid(self, raw):
        assert parse_case_label(raw) is None

    def test_parse_largest_stored_number(self):
        assert parse_case_label("W9223372036854775807") == ("W", 2**63 - 1)


class TestDisplayNames:
    """Tests for action and event display names."""

    def test_known_actions(self):
        assert action_display_name("unwarn_all") == "Unwarn All"
        assert action_display_name("warn") == "Warn"

    def test_unknown_actions_title_cased(self):
        assert action_display_name("word_filter_warn") == "Word Filter Warn"
        assert action_display_name("auto_timeout") == "Auto Timeout"
        assert action_display_name("") == "Unknown"

    def test_events(self):
        assert event_display_name("reason_updated") == "Reason Updated"
        assert event_display_name("mystery") == "Updated"

    def test_truncate(self):
        assert truncate(None) == "None"
        assert truncate("short", 10) == "short"
        assert truncate("a" * 20, 10) == "aaaaaaa..."


class TestEmbeds:
    """Tests for embed builders."""

    def test_sanitize_mentions(self):
        assert sanitize_mentions("hi @everyone") == "hi @\u200beveryone"
        assert sanitize_mentions(None) == ""

    def test_word_filter_labels(self):
        assert word_filter_action_label("warn_and_log") == "Warn, Delete & Log"
        assert word_filter_action_label("unknown") == "Log Only"

    @pytest.mark.parametrize("action,color", [
        ("auto_timeout", EmbedColors.LOG_AUTO),
        ("unwarn", EmbedColors.LOG_POSITIVE),
        ("ban", EmbedColors.LOG_NEGATIVE),
        ("warn", EmbedColors.LOG_WARNING),
        ("word_filter_delete", EmbedColors.LOG_WARNING),
    ])
    def test_case_color(self, action, color):
        assert case_color(action) == color

    def test_case_embed(self):
        embed = build_case_embed(_summary(reason="ping @here"))

        assert embed.title == "#W1"
        assert "**Action :** Warn" in embed.description
        assert "<@222>" in embed.description
        assert "@\u200bhere" in embed.description
        assert "Duration" not in embed.description

    def test_case_embed_with_duration(self):
        embed = build_case_embed(_summary(action="timeout", code="T", duration=3600))
        assert "**Duration :** 1h" in embed.description

    def test_auto_timeout_embed(self):
        embed = build_auto_timeout_embed(_summary("auto_timeout", "AT", 4), "Auto-escalation", 1800)

        assert embed.title == "Auto Timeout - #AT4"
        assert "30m" in embed.description
        assert embed.color.value == EmbedColors.LOG_AUTO

    def test_word_filter_embed(self):
        embed = build_word_filter_embed(
            _summary("word_filter_timeout", "WF", 2, duration=300),
            "badword",
            "timeout_delete_and_log",
        )

        assert embed.title == "Word Filter Violation - #WF2"
        assert "**Violation :** badword" in embed.description
        assert "**Action Taken :** Timeout, Delete & Log" in embed.description
        assert "**Timeout Duration :** 5m" in embed.description

    def test_moderation_dm(self):
        embed = build_moderation_dm("Test Server", "warned")

        assert embed.title == "You have been warned in Test Server"
        assert embed.description == "No additional details were provided."

    def test_action_embed(self, mock_discord_user):
        embed = build_action_embed(mock_discord_user, "warned #2", "spam", case_label="W5")

        assert isinstance(embed, discord.Embed)
        assert embed.author.name == "Test User has been warned #2"
        assert embed.footer.text == "#W5"
