"""
Autumn Moderation Bot - Cases Cog
=================================

/case view|reason|note|history and /modlogs.

Cases are addressed by label (W12, AT3). Labels are parsed
case-insensitively; a missing case is a normal reply, not an error.
"""

from typing import TYPE_CHECKING, List, Optional

import discord
from discord import app_commands
from discord.ext import commands

from autumn.core.constants import CASE_HISTORY_LIMIT, MODLOGS_DEFAULT_LIMIT, NOTE_MAX_LENGTH, REASON_MAX_LENGTH
from autumn.core.database import StorageError
from autumn.core.database.models import CaseFilters
from autumn.core.logger import logger
from autumn.utils.embeds import (
    build_case_detail_embed,
    build_case_history_embed,
    build_case_list_embed,
)
from autumn.utils.formatting import format_case_label, parse_case_label

from autumn.commands.moderation_helpers import report_storage_failure, respond

if TYPE_CHECKING:
    from autumn.bot import AutumnBot


INVALID_LABEL_MESSAGE = "Case id must look like W1, B2, AT3, etc."
CASE_NOT_FOUND_MESSAGE = "Case not found."

MODLOG_ACTION_CHOICES = [
    app_commands.Choice(name=name, value=value)
    for name, value in (
        ("Warn", "warn"),
        ("Unwarn", "unwarn"),
        ("Unwarn All", "unwarn_all"),
        ("Timeout", "timeout"),
        ("Auto Timeout", "auto_timeout"),
        ("Ban", "ban"),
        ("Kick", "kick"),
        ("Word Filter Delete", "word_filter_delete"),
        ("Word Filter Warn", "word_filter_warn"),
        ("Word Filter Timeout", "word_filter_timeout"),
        ("Word Filter Log", "word_filter_log"),
    )
]


class CasesCog(commands.Cog):
    """Cog for reading and annotating the case ledger."""

    case = app_commands.Group(
        name="case",
        description="View or edit a moderation case",
        guild_only=True,
        default_permissions=discord.Permissions(moderate_members=True),
    )

    def __init__(self, bot: "AutumnBot") -> None:
        self.bot = bot
        self.db = bot.db

    # =========================================================================
    # /case view
    # =========================================================================

    @case.command(name="view", description="Show a case")
    @app_commands.describe(label="Case id, e.g. W1")
    @app_commands.checks.has_permissions(moderate_members=True)
    async def case_view(self, interaction: discord.Interaction, label: str) -> None:
        parsed = parse_case_label(label)
        if parsed is None:
            await respond(interaction, INVALID_LABEL_MESSAGE, ephemeral=True)
            return

        try:
            case = await self.db.get_case_by_label(interaction.guild_id, *parsed)
        except StorageError as e:
            await report_storage_failure(interaction, "Case View", e, [("Label", label)],
                                         message="Failed to load case.")
            return

        if case is None:
            await respond(interaction, CASE_NOT_FOUND_MESSAGE, ephemeral=True)
            return

        await respond(interaction, embed=build_case_detail_embed(case))

    # =========================================================================
    # /case reason
    # =========================================================================

    @case.command(name="reason", description="Replace a case's reason")
    @app_commands.describe(label="Case id, e.g. W1", reason="New reason")
    @app_commands.checks.has_permissions(moderate_members=True)
    async def case_reason(
        self,
        interaction: discord.Interaction,
        label: str,
        reason: app_commands.Range[str, 1, REASON_MAX_LENGTH],
    ) -> None:
        parsed = parse_case_label(label)
        if parsed is None:
            await respond(interaction, INVALID_LABEL_MESSAGE, ephemeral=True)
            return

        new_reason = reason.strip()
        if not new_reason:
            await respond(interaction, "Reason cannot be empty.", ephemeral=True)
            return

        try:
            updated = await self.db.update_case_reason(
                interaction.guild_id, *parsed, interaction.user.id, new_reason,
            )
        except StorageError as e:
            await report_storage_failure(interaction, "Case Reason Update", e, [("Label", label)],
                                         message="Failed to update case reason.")
            return

        if updated is None:
            await respond(interaction, CASE_NOT_FOUND_MESSAGE, ephemeral=True)
            return

        await respond(interaction, f"Updated reason for #{updated.label}.")

    # =========================================================================
    # /case note
    # =========================================================================

    @case.command(name="note", description="Attach a note to a case")
    @app_commands.describe(label="Case id, e.g. W1", note="Note text")
    @app_commands.checks.has_permissions(moderate_members=True)
    async def case_note(
        self,
        interaction: discord.Interaction,
        label: str,
        note: app_commands.Range[str, 1, NOTE_MAX_LENGTH],
    ) -> None:
        parsed = parse_case_label(label)
        if parsed is None:
            await respond(interaction, INVALID_LABEL_MESSAGE, ephemeral=True)
            return

        text = note.strip()
        if not text:
            await respond(interaction, "Note cannot be empty.", ephemeral=True)
            return

        try:
            added = await self.db.add_case_note(interaction.guild_id, *parsed, interaction.user.id, text)
        except StorageError as e:
            await report_storage_failure(interaction, "Case Note", e, [("Label", label)],
                                         message="Failed to add case note.")
            return

        if not added:
            await respond(interaction, CASE_NOT_FOUND_MESSAGE, ephemeral=True)
            return

        await respond(interaction, f"Added note to #{format_case_label(*parsed)}.")

    # =========================================================================
    # /case history
    # =========================================================================

    @case.command(name="history", description="Show a case's edit history")
    @app_commands.describe(label="Case id, e.g. W1")
    @app_commands.checks.has_permissions(moderate_members=True)
    async def case_history(self, interaction: discord.Interaction, label: str) -> None:
        parsed = parse_case_label(label)
        if parsed is None:
            await respond(interaction, INVALID_LABEL_MESSAGE, ephemeral=True)
            return

        try:
            events = await self.db.get_case_events(interaction.guild_id, *parsed)
        except StorageError as e:
            await report_storage_failure(interaction, "Case History", e, [("Label", label)],
                                         message="Failed to load case events.")
            return

        if not events:
            await respond(interaction, CASE_NOT_FOUND_MESSAGE, ephemeral=True)
            return

        await respond(interaction, embed=build_case_history_embed(*parsed, events[-CASE_HISTORY_LIMIT:]))

    # =========================================================================
    # /modlogs
    # =========================================================================

    @app_commands.command(name="modlogs", description="List recent moderation cases")
    @app_commands.describe(
        user="Only cases against this user",
        moderator="Only cases by this moderator",
        action="Only this action",
        limit="How many cases to show (1-25)",
    )
    @app_commands.choices(action=MODLOG_ACTION_CHOICES)
    @app_commands.guild_only()
    @app_commands.default_permissions(moderate_members=True)
    @app_commands.checks.has_permissions(moderate_members=True)
    async def modlogs(
        self,
        interaction: discord.Interaction,
        user: Optional[discord.User] = None,
        moderator: Optional[discord.User] = None,
        action: Optional[app_commands.Choice[str]] = None,
        limit: Optional[app_commands.Range[int, 1, 25]] = None,
    ) -> None:
        filters = CaseFilters(
            target_user_id=user.id if user else None,
            moderator_user_id=moderator.id if moderator else None,
            action=action.value if action else None,
            limit=limit or MODLOGS_DEFAULT_LIMIT,
        )

        try:
            cases = await self.db.list_recent_cases(interaction.guild_id, filters)
        except StorageError as e:
            await report_storage_failure(interaction, "Modlogs", e, message="Failed to load cases.")
            return

        if not cases:
            await respond(interaction, "No matching moderation cases found.", ephemeral=True)
            return

        logger.debug("Modlogs Listed", [
            ("Guild ID", str(interaction.guild_id)),
            ("Results", str(len(cases))),
        ])

        title_parts: List[str] = ["Moderation Cases"]
        if user:
            title_parts.append(f"for {user.display_name}")
        await respond(interaction, embed=build_case_list_embed(" ".join(title_parts), cases), ephemeral=True)
