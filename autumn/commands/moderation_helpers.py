"""
Autumn Moderation Bot - Shared Moderation Helpers
=================================================

Replies, target validation and case recording shared by the cogs.
"""

from typing import TYPE_CHECKING, List, Optional, Tuple

import discord

from autumn.core.constants import REASON_MAX_LENGTH
from autumn.core.database import StorageError
from autumn.core.database.models import CaseSummary, NewCase
from autumn.core.logger import logger
from autumn.utils.discord_errors import log_http_error
from autumn.utils.embeds import build_case_embed

if TYPE_CHECKING:
    from autumn.bot import AutumnBot


STORAGE_FAILURE_MESSAGE = "Something went wrong while saving. Please try again."


# =============================================================================
# Replies
# =============================================================================

async def respond(
    interaction: discord.Interaction,
    content: Optional[str] = None,
    *,
    embed: Optional[discord.Embed] = None,
    ephemeral: bool = False,
) -> None:
    """Send via response or followup, whichever is still open."""
    kwargs = {"ephemeral": ephemeral}
    if content is not None:
        kwargs["content"] = content
    if embed is not None:
        kwargs["embed"] = embed

    try:
        if interaction.response.is_done():
            await interaction.followup.send(**kwargs)
        else:
            await interaction.response.send_message(**kwargs)
    except discord.HTTPException as e:
        log_http_error(e, "Command Reply", [
            ("User", f"{interaction.user.name} ({interaction.user.id})"),
        ])


async def report_storage_failure(
    interaction: discord.Interaction,
    operation: str,
    error: StorageError,
    context: Optional[List[Tuple[str, str]]] = None,
    message: str = STORAGE_FAILURE_MESSAGE,
) -> None:
    """Log a StorageError and tell the invoker, ephemerally."""
    details = [
        ("Guild ID", str(interaction.guild_id)),
        ("User", f"{interaction.user.name} ({interaction.user.id})"),
    ]
    if context:
        details.extend(context)
    details.append(("Error", str(error)[:100]))

    logger.error(f"{operation} Failed", details)
    await respond(interaction, message, ephemeral=True)


# =============================================================================
# Validation
# =============================================================================

def validate_target(
    interaction: discord.Interaction,
    target: discord.abc.User,
    action: str,
) -> Optional[str]:
    """
    Error message if ``target`` cannot receive ``action``, else None.

    Args:
        interaction: Invoking interaction.
        target: User the action is aimed at.
        action: Verb for the message, e.g. "warn".
    """
    if target.id == interaction.user.id:
        return f"You can't {action} yourself."
    if target.bot:
        return "You can't use moderation actions on bots or application accounts."
    return None


def clean_reason(reason: Optional[str], default: str) -> str:
    text = (reason or "").strip()
    if not text:
        return default
    return text[:REASON_MAX_LENGTH]


# =============================================================================
# Case Recording
# =============================================================================

async def create_case_and_publish(bot: "AutumnBot", new_case: NewCase) -> Optional[CaseSummary]:
    """
    Record a case and post it to the modlog.

    A failed case write is logged and returns None; the calling command
    has already done its work and keeps going.
    """
    try:
        case = await bot.db.create_case(new_case)
    except StorageError as e:
        logger.error("Case Create Failed", [
            ("Guild ID", str(new_case.guild_id)),
            ("Action", new_case.action),
            ("Target ID", str(new_case.target_user_id)),
            ("Error", str(e)[:100]),
        ])
        return None

    await bot.sink.publish_case(new_case.guild_id, build_case_embed(case))
    return case


__all__ = [
    "STORAGE_FAILURE_MESSAGE",
    "respond",
    "report_storage_failure",
    "validate_target",
    "clean_reason",
    "create_case_and_publish",
]
