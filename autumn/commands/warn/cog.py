"""
Autumn Moderation Bot - Warn Cog
================================

/warn, /warnings and /unwarn.

DESIGN:
    /warn records the warning first; the "warned #N" number is the
    user's total warning count. The case, modlog post and DM follow as
    best-effort steps, then escalation runs. Escalation problems never
    fail the command: the warning is already stored.
"""

from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands
from discord.ext import commands

from autumn.core.config import EmbedColors
from autumn.core.constants import DEFAULT_REASON, WARNINGS_PAGE_SIZE
from autumn.core.database import StorageError
from autumn.core.database.models import CASE_STATUS_COMPLETED, NewCase
from autumn.core.logger import logger
from autumn.utils.embeds import build_action_embed, sanitize_mentions

from autumn.commands.moderation_helpers import (
    clean_reason,
    create_case_and_publish,
    report_storage_failure,
    respond,
    validate_target,
)

if TYPE_CHECKING:
    from autumn.bot import AutumnBot


class WarnCog(commands.Cog):
    """Cog for issuing, listing and removing warnings."""

    def __init__(self, bot: "AutumnBot") -> None:
        self.bot = bot
        self.db = bot.db

    # =========================================================================
    # /warn
    # =========================================================================

    @app_commands.command(name="warn", description="Issue a warning to a user")
    @app_commands.describe(user="The user to warn", reason="Reason for the warning")
    @app_commands.guild_only()
    @app_commands.default_permissions(moderate_members=True)
    @app_commands.checks.has_permissions(moderate_members=True)
    async def warn(
        self,
        interaction: discord.Interaction,
        user: discord.User,
        reason: Optional[str] = None,
    ) -> None:
        """Record a warning, log a case and run escalation."""
        error = validate_target(interaction, user, "warn")
        if error:
            await respond(interaction, error, ephemeral=True)
            return

        guild_id = interaction.guild_id
        reason = clean_reason(reason, DEFAULT_REASON)

        try:
            record = await self.db.record_warning(guild_id, user.id, interaction.user.id, reason)
        except StorageError as e:
            await report_storage_failure(interaction, "Warn Command", e, [
                ("Target", f"{user.name} ({user.id})"),
            ])
            return

        case = await create_case_and_publish(self.bot, NewCase(
            guild_id=guild_id,
            target_user_id=user.id,
            moderator_user_id=interaction.user.id,
            action="warn",
            reason=reason,
        ))

        logger.tree("USER WARNED", [
            ("User", f"{user.name} ({user.id})"),
            ("Moderator", f"{interaction.user.name} ({interaction.user.id})"),
            ("Warn #", str(record.warn_number)),
            ("Case", case.label if case else "None"),
            ("Reason", reason[:50]),
        ], emoji="👮")

        await respond(interaction, embed=build_action_embed(
            user,
            f"warned #{record.warn_number}",
            reason,
            case_label=case.label if case else None,
        ))

        await self.bot.sink.send_dm(user, guild_id, "warned", reason, None)

        await self.bot.escalation.check_and_escalate(guild_id, user, self.bot.user.id)

    # =========================================================================
    # /warnings
    # =========================================================================

    @app_commands.command(name="warnings", description="Show a user's warnings")
    @app_commands.describe(user="The user to check", days="Only show warnings from the last N days")
    @app_commands.guild_only()
    @app_commands.default_permissions(moderate_members=True)
    @app_commands.checks.has_permissions(moderate_members=True)
    async def warnings(
        self,
        interaction: discord.Interaction,
        user: discord.User,
        days: Optional[app_commands.Range[int, 1, 3650]] = None,
    ) -> None:
        """
        List warnings newest first.

        Numbers are positions in the user's full history, the same
        numbers /unwarn takes, even when a day window is applied.
        """
        try:
            entries = await self.db.list_warnings(interaction.guild_id, user.id)
        except StorageError as e:
            await report_storage_failure(interaction, "Warnings Command", e, [
                ("Target", f"{user.name} ({user.id})"),
            ])
            return

        numbered = list(enumerate(entries, start=1))
        if days is not None:
            since = self.db.now() - days * 86400
            numbered = [(n, entry) for n, entry in numbered if entry.warned_at >= since]
            window_label = f"last {days} day(s)"
        else:
            window_label = "all time"

        embed = discord.Embed(
            title=f"Warnings for {user.display_name}",
            color=EmbedColors.WARNING,
        )
        embed.set_thumbnail(url=user.display_avatar.url)

        if not numbered:
            embed.description = f"Total warnings in {window_label}: **0**\n\nNo warnings in this period."
            await respond(interaction, embed=embed, ephemeral=True)
            return

        shown = list(reversed(numbered))[:WARNINGS_PAGE_SIZE]
        lines = [f"Total warnings in {window_label}: **{len(numbered)}**", ""]
        for number, entry in shown:
            lines.append(f"**#{number}** • by <@{entry.moderator_id}> • <t:{entry.warned_at}:R>")
            lines.append(f"> {sanitize_mentions(entry.reason)[:200]}")

        embed.description = "\n".join(lines)
        if len(numbered) > len(shown):
            embed.set_footer(text=f"Showing {len(shown)} most recent of {len(numbered)}")

        await respond(interaction, embed=embed, ephemeral=True)

    # =========================================================================
    # /unwarn
    # =========================================================================

    @app_commands.command(name="unwarn", description="Remove a warning by number, or all warnings")
    @app_commands.describe(
        user="The user to modify warnings for",
        selector="Warning number (see /warnings) or 'all'",
        reason="Reason for removing",
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(moderate_members=True)
    @app_commands.checks.has_permissions(moderate_members=True)
    async def unwarn(
        self,
        interaction: discord.Interaction,
        user: discord.User,
        selector: str,
        reason: Optional[str] = None,
    ) -> None:
        guild_id = interaction.guild_id
        selector = selector.strip()

        if selector.lower() == "all":
            try:
                removed = await self.db.clear_warnings(guild_id, user.id)
            except StorageError as e:
                await report_storage_failure(interaction, "Unwarn Command", e, [
                    ("Target", f"{user.name} ({user.id})"),
                ])
                return

            if removed == 0:
                await respond(interaction, f"{user.display_name} has no warnings.", ephemeral=True)
                return

            case = await create_case_and_publish(self.bot, NewCase(
                guild_id=guild_id,
                target_user_id=user.id,
                moderator_user_id=interaction.user.id,
                action="unwarn_all",
                reason=clean_reason(reason, f"Removed {removed} warning(s)"),
                status=CASE_STATUS_COMPLETED,
            ))
            await respond(interaction, self._with_label(
                f"Removed {removed} warning(s) for {user.display_name}.", case,
            ))
            return

        if not (selector.isascii() and selector.isdigit()):
            await respond(interaction, "Selector must be a warning number or 'all'.", ephemeral=True)
            return

        number = int(selector)
        if number < 1:
            await respond(interaction, "Warning number must be 1 or greater.", ephemeral=True)
            return

        try:
            removed = await self.db.remove_warning_by_number(guild_id, user.id, number)
        except StorageError as e:
            await report_storage_failure(interaction, "Unwarn Command", e, [
                ("Target", f"{user.name} ({user.id})"),
                ("Warning #", str(number)),
            ])
            return

        if not removed:
            await respond(
                interaction,
                f"Warning #{number} was not found for {user.display_name}.",
                ephemeral=True,
            )
            return

        case = await create_case_and_publish(self.bot, NewCase(
            guild_id=guild_id,
            target_user_id=user.id,
            moderator_user_id=interaction.user.id,
            action="unwarn",
            reason=clean_reason(reason, f"Removed warning #{number}"),
            status=CASE_STATUS_COMPLETED,
        ))
        await respond(interaction, self._with_label(
            f"Removed warning #{number} for {user.display_name}.", case,
        ))

    @staticmethod
    def _with_label(message: str, case) -> str:
        return f"{message} (#{case.label})" if case else message
