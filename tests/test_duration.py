"""
Autumn Moderation Bot - Duration Tests
======================================

Tests for compact duration parsing and formatting.
"""

import pytest

from autumn.utils.duration import format_compact_duration, parse_duration


class TestParseDuration:
    """Tests for parse_duration."""

    @pytest.mark.parametrize("raw,seconds", [
        ("30s", 30),
        ("10m", 600),
        ("2h", 7200),
        ("7d", 604800),
        ("1d12h", 129600),
        ("1h 30m", 5400),
        ("1H30M", 5400),
        ("90", 90),
        ("  45m  ", 2700),
        ("1d2h3m4s", 93784),
    ])
    def test_valid(self, raw, seconds):
        assert parse_duration(raw) == seconds

    @pytest.mark.parametrize("raw", [
        None,
        "",
        "   ",
        "0",
        "0m",
        "1h0m",
        "abc",
        "5w",
        "1h30",
        "30 minutes",
        "-5m",
        "1.5h",
    ])
    def test_invalid(self, raw):
        assert parse_duration(raw) is None


class TestFormatCompactDuration:
    """Tests for format_compact_duration."""

    @pytest.mark.parametrize("seconds,text", [
        (0, "0s"),
        (59, "59s"),
        (60, "1m"),
        (90, "1m 30s"),
        (300, "5m"),
        (3600, "1h"),
        (3670, "1h 1m 10s"),
        (7200, "2h"),
        (86400, "1d"),
        (90000, "1d 1h"),
        (90061, "1d 1h"),
        (604800, "7d"),
        (-5, "0s"),
    ])
    def test_format(self, seconds, text):
        assert format_compact_duration(seconds) == text
