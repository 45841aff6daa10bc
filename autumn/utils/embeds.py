"""
Autumn Moderation Bot - Embed Builders
======================================

Embeds for modlog case posts, user DMs and command replies.

DESIGN:
    Builders are pure: they take records and strings and return a
    discord.Embed. Sending (and deciding what to do when sending fails)
    belongs to the moderation sink and the cogs.

    User-supplied text has "@" defused with a zero-width space so a
    reason can never ping @everyone from a log channel.
"""

from typing import List, Optional

import discord

from autumn.core.config import EmbedColors
from autumn.core.database.models import CaseEvent, CaseSummary, ModerationCase
from autumn.utils.duration import format_compact_duration
from autumn.utils.formatting import action_display_name, event_display_name, format_case_label


WORD_FILTER_ACTION_LABELS = {
    "timeout_delete_and_log": "Timeout, Delete & Log",
    "delete_and_log": "Delete & Log",
    "warn_and_log": "Warn, Delete & Log",
    "log_only": "Log Only",
}

POSITIVE_ACTIONS = ("unban", "untimeout", "unwarn", "unwarn_all")
NEGATIVE_ACTIONS = ("ban", "kick", "purge", "terminate")


def sanitize_mentions(text: Optional[str]) -> str:
    return (text or "").replace("@", "@\u200b")


def word_filter_action_label(action: str) -> str:
    return WORD_FILTER_ACTION_LABELS.get(action, "Log Only")


def case_color(action: str) -> int:
    """Embed color for a case, by action family."""
    if action == "auto_timeout":
        return EmbedColors.LOG_AUTO
    if action in POSITIVE_ACTIONS:
        return EmbedColors.LOG_POSITIVE
    if action in NEGATIVE_ACTIONS:
        return EmbedColors.LOG_NEGATIVE
    return EmbedColors.LOG_WARNING


# =============================================================================
# Modlog Case Posts
# =============================================================================

def build_case_embed(case: CaseSummary) -> discord.Embed:
    """Generic modlog post for a manually created case."""
    lines = [f"**Action :** {action_display_name(case.action)}"]

    if case.target_user_id is not None:
        lines.append(f"**Target :** <@{case.target_user_id}>")

    lines.append(f"**Reason :** {sanitize_mentions(case.reason)}")

    if case.duration_seconds is not None:
        lines.append(f"**Duration :** {format_compact_duration(case.duration_seconds)}")

    lines.append(f"**Moderator :** <@{case.moderator_user_id}>")
    lines.append(f"**When :** <t:{case.created_at}:R> • <t:{case.created_at}:f>")

    return discord.Embed(
        title=f"#{case.label}",
        description="\n".join(lines),
        color=case_color(case.action),
    )


def build_auto_timeout_embed(case: CaseSummary, reason: str, timeout_seconds: int) -> discord.Embed:
    lines = [
        f"**User :** <@{case.target_user_id or 0}>",
        f"**Reason :** {sanitize_mentions(reason)}",
        f"**Duration :** {format_compact_duration(timeout_seconds)}",
        "",
        f"**When :** <t:{case.created_at}:R>",
    ]
    return discord.Embed(
        title=f"Auto Timeout - #{case.label}",
        description="\n".join(lines),
        color=EmbedColors.LOG_AUTO,
    )


def build_word_filter_embed(case: CaseSummary, matched_word: str, action: str) -> discord.Embed:
    lines = [
        f"**User :** <@{case.target_user_id or 0}>",
        f"**Violation :** {sanitize_mentions(matched_word)}",
        f"**Action Taken :** {word_filter_action_label(action)}",
    ]

    if case.duration_seconds is not None:
        lines.append(f"**Timeout Duration :** {format_compact_duration(case.duration_seconds)}")

    lines.append("")
    lines.append(f"**When :** <t:{case.created_at}:R>")

    return discord.Embed(
        title=f"Word Filter Violation - #{case.label}",
        description="\n".join(lines),
        color=EmbedColors.LOG_WARNING,
    )


# =============================================================================
# Direct Messages
# =============================================================================

def build_moderation_dm(
    guild_name: str,
    action_past_tense: str,
    reason: Optional[str] = None,
    duration: Optional[str] = None,
) -> discord.Embed:
    """
    DM sent to the target of a moderation action.

    Args:
        guild_name: Server the action happened in.
        action_past_tense: e.g. "warned", "timed out".
        reason: Optional reason line.
        duration: Optional pre-formatted duration line.
    """
    details = []
    if reason:
        details.append(f"**Reason :** {sanitize_mentions(reason)}")
    if duration:
        details.append(f"**Duration :** {duration}")

    return discord.Embed(
        title=f"You have been {action_past_tense} in {guild_name}",
        description="\n".join(details) if details else "No additional details were provided.",
        color=EmbedColors.WARNING,
    )


# =============================================================================
# Command Replies
# =============================================================================

def build_action_embed(
    user: discord.abc.User,
    action_past_tense: str,
    reason: Optional[str],
    duration: Optional[str] = None,
    case_label: Optional[str] = None,
) -> discord.Embed:
    """Reply shown in channel after a moderation command, e.g. "x has been warned #2"."""
    lines = [
        f"**Target :** <@{user.id}>",
        f"**Reason :** {sanitize_mentions(reason or 'No reason provided')}",
    ]
    if duration:
        lines.append(f"**Duration :** {duration}")

    embed = discord.Embed(description="\n".join(lines), color=EmbedColors.WARNING)
    embed.set_author(
        name=f"{user.display_name} has been {action_past_tense}",
        icon_url=user.display_avatar.url,
    )
    if case_label:
        embed.set_footer(text=f"#{case_label}")
    return embed


def build_case_detail_embed(case: ModerationCase) -> discord.Embed:
    """Full view of one case for /case view."""
    embed = discord.Embed(
        title=f"Case #{case.label}",
        color=case_color(case.action),
    )
    embed.add_field(name="Action", value=action_display_name(case.action), inline=True)
    embed.add_field(name="Status", value=case.status.title(), inline=True)
    embed.add_field(name="Case #", value=f"`{case.case_number}`", inline=True)
    embed.add_field(
        name="Target",
        value=f"<@{case.target_user_id}>" if case.target_user_id is not None else "None",
        inline=True,
    )
    embed.add_field(name="Moderator", value=f"<@{case.moderator_user_id}>", inline=True)
    if case.duration_seconds is not None:
        embed.add_field(name="Duration", value=format_compact_duration(case.duration_seconds), inline=True)
    embed.add_field(name="Reason", value=sanitize_mentions(case.reason)[:1024] or "None", inline=False)
    embed.add_field(
        name="Created",
        value=f"<t:{case.created_at}:f> (<t:{case.created_at}:R>)",
        inline=True,
    )
    if case.updated_at != case.created_at:
        embed.add_field(name="Updated", value=f"<t:{case.updated_at}:R>", inline=True)
    return embed


def build_case_history_embed(case_code: str, action_case_number: int, events: List[CaseEvent]) -> discord.Embed:
    lines = []
    for event in events:
        line = f"<t:{event.created_at}:R> **{event_display_name(event.event_type)}** by <@{event.actor_user_id}>"
        if event.old_reason is not None or event.new_reason is not None:
            line += (
                f"\n> {sanitize_mentions(event.old_reason or 'None')}"
                f" → {sanitize_mentions(event.new_reason or 'None')}"
            )
        elif event.note:
            line += f"\n> {sanitize_mentions(event.note)}"
        lines.append(line)

    description = "\n".join(lines)
    if len(description) > 4000:
        description = description[:3997] + "..."

    return discord.Embed(
        title=f"History - #{format_case_label(case_code, action_case_number)}",
        description=description or "No events recorded.",
        color=EmbedColors.INFO,
    )


def build_case_list_embed(title: str, cases: List[CaseSummary]) -> discord.Embed:
    """Compact list used by /modlogs."""
    lines = []
    for case in cases:
        target = f"<@{case.target_user_id}>" if case.target_user_id is not None else "-"
        reason = sanitize_mentions(case.reason)
        if len(reason) > 60:
            reason = reason[:57] + "..."
        lines.append(
            f"`#{case.label}` {action_display_name(case.action)} • {target} • <t:{case.created_at}:R>\n> {reason}"
        )

    description = "\n".join(lines)
    if len(description) > 4000:
        description = description[:3997] + "..."

    return discord.Embed(
        title=title,
        description=description or "No cases found.",
        color=EmbedColors.INFO,
    )


__all__ = [
    "WORD_FILTER_ACTION_LABELS",
    "sanitize_mentions",
    "word_filter_action_label",
    "case_color",
    "build_case_embed",
    "build_auto_timeout_embed",
    "build_word_filter_embed",
    "build_moderation_dm",
    "build_action_embed",
    "build_case_detail_embed",
    "build_case_history_embed",
    "build_case_list_embed",
]
