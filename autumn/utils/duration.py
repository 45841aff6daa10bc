"""
Duration Utilities
==================

Parsing and formatting for the compact durations used by moderation
commands and case logs.

Usage:
    from autumn.utils.duration import parse_duration, format_compact_duration

    seconds = parse_duration("1h30m")       # 5400
    seconds = parse_duration("90")          # 90 (plain seconds)
    display = format_compact_duration(5400) # "1h 30m"
"""

import re
from typing import Optional


# =============================================================================
# Time Constants
# =============================================================================

SECONDS_PER_WEEK = 604800
SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60

TIME_MULTIPLIERS = {
    "d": SECONDS_PER_DAY,
    "h": SECONDS_PER_HOUR,
    "m": SECONDS_PER_MINUTE,
    "s": 1,
}

_SEGMENT = re.compile(r"(\d+)([smhd]?)")


# =============================================================================
# Duration Suggestions for Autocomplete
# =============================================================================

DURATION_SUGGESTIONS = [
    ("1 Hour", "1h"),
    ("6 Hours", "6h"),
    ("12 Hours", "12h"),
    ("1 Day", "1d"),
    ("3 Days", "3d"),
    ("7 Days", "7d"),
    ("30 Days", "30d"),
]


# =============================================================================
# Parsing
# =============================================================================

def parse_duration(duration_str: Optional[str]) -> Optional[int]:
    """
    Parse a compact duration string into seconds.

    Accepts one or more ``<number><unit>`` segments with units s, m, h, d
    (case-insensitive, whitespace ignored), or a single plain number of
    seconds. A unitless number may not follow a unit segment.

    Args:
        duration_str: Duration string to parse.

    Returns:
        Duration in seconds, or None if empty, malformed, or zero.

    Examples:
        >>> parse_duration("30s")
        30
        >>> parse_duration("1h 30m")
        5400
        >>> parse_duration("90")
        90
        >>> parse_duration("0m")
        None
    """
    if not duration_str:
        return None

    compact = re.sub(r"\s+", "", duration_str).lower()
    if not compact:
        return None

    total = 0
    pos = 0
    saw_unit = False

    while pos < len(compact):
        match = _SEGMENT.match(compact, pos)
        if not match:
            return None

        number = int(match.group(1))
        unit = match.group(2)
        if number == 0:
            return None
        if not unit and saw_unit:
            return None

        saw_unit = saw_unit or bool(unit)
        total += number * TIME_MULTIPLIERS.get(unit, 1)
        pos = match.end()

        # A unitless number must be the whole string.
        if not unit and pos < len(compact):
            return None

    return total if total > 0 else None


# =============================================================================
# Formatting
# =============================================================================

def format_compact_duration(total_seconds: int) -> str:
    """
    Format seconds as a compact duration.

    Days show at most hours alongside; below a day, hours, minutes and
    seconds are all shown when non-zero.

    Examples:
        >>> format_compact_duration(59)
        "59s"
        >>> format_compact_duration(3670)
        "1h 1m 10s"
        >>> format_compact_duration(90000)
        "1d 1h"
    """
    total_seconds = max(int(total_seconds), 0)
    days, remainder = divmod(total_seconds, SECONDS_PER_DAY)
    hours, remainder = divmod(remainder, SECONDS_PER_HOUR)
    minutes, seconds = divmod(remainder, SECONDS_PER_MINUTE)

    if days > 0:
        return f"{days}d {hours}h" if hours > 0 else f"{days}d"

    if hours > 0:
        parts = [f"{hours}h"]
        if minutes > 0:
            parts.append(f"{minutes}m")
        if seconds > 0:
            parts.append(f"{seconds}s")
        return " ".join(parts)

    if minutes > 0:
        return f"{minutes}m {seconds}s" if seconds > 0 else f"{minutes}m"

    return f"{seconds}s"


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "SECONDS_PER_WEEK",
    "SECONDS_PER_DAY",
    "SECONDS_PER_HOUR",
    "SECONDS_PER_MINUTE",
    "DURATION_SUGGESTIONS",
    "parse_duration",
    "format_compact_duration",
]
