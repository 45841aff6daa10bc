"""
Autumn Moderation Bot - Formatting Utilities
============================================

Case labels and user-facing names for actions and case events.
"""

from typing import Optional, Tuple

from autumn.core.constants import MAX_STORED_INT


ACTION_DISPLAY_NAMES = {
    "warn": "Warn",
    "ban": "Ban",
    "kick": "Kick",
    "timeout": "Timeout",
    "unban": "Unban",
    "untimeout": "Untimeout",
    "unwarn": "Unwarn",
    "unwarn_all": "Unwarn All",
    "purge": "Purge",
    "terminate": "Terminate",
}

EVENT_DISPLAY_NAMES = {
    "created": "Created",
    "reason_updated": "Reason Updated",
    "note_added": "Note Added",
}


def format_case_label(case_code: str, action_case_number: int) -> str:
    """Build a case label, e.g. ("w", 12) -> "W12"."""
    return f"{case_code.upper()}{action_case_number}"


def parse_case_label(raw: Optional[str]) -> Optional[Tuple[str, int]]:
    """
    Split a case label into its code and number.

    Leading ASCII letters form the code; the rest must be a positive
    integer that fits a 64-bit column. Surrounding whitespace is ignored.

    Examples:
        >>> parse_case_label("w12")
        ("W", 12)
        >>> parse_case_label("  t5  ")
        ("T", 5)
        >>> parse_case_label("W0")
        None
    """
    text = (raw or "").strip()
    if not text:
        return None

    split = 0
    while split < len(text) and text[split].isascii() and text[split].isalpha():
        split += 1

    if split == 0 or split >= len(text):
        return None

    code, number_part = text[:split], text[split:]
    if not number_part.isascii() or not number_part.isdigit():
        return None

    number = int(number_part)
    if number <= 0 or number > MAX_STORED_INT:
        return None
    return code.upper(), number


def action_display_name(action: str) -> str:
    """
    User-facing name for an action key.

    Unknown keys are title-cased on underscores ("word_filter_warn" ->
    "Word Filter Warn").
    """
    if action in ACTION_DISPLAY_NAMES:
        return ACTION_DISPLAY_NAMES[action]

    normalized = (action or "").strip()
    if not normalized:
        return "Unknown"

    return " ".join(
        part[0].upper() + part[1:].lower()
        for part in normalized.split("_")
        if part
    )


def event_display_name(event_type: str) -> str:
    return EVENT_DISPLAY_NAMES.get(event_type, "Updated")


def truncate(text: Optional[str], limit: int = 100) -> str:
    """Shorten ``text`` for logs and embeds."""
    if not text:
        return "None"
    return text if len(text) <= limit else text[: limit - 3] + "..."


__all__ = [
    "format_case_label",
    "parse_case_label",
    "action_display_name",
    "event_display_name",
    "truncate",
]
