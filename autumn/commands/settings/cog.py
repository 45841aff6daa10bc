"""
Autumn Moderation Bot - Settings Cog
====================================

/escalation, /modlogchannel and /wordfilter.

All settings commands require Manage Server. Every write goes through
the database mixins, which drop the cached config for the guild, so
the next warning or message sees the new value.
"""

from typing import TYPE_CHECKING, List

import discord
from discord import app_commands
from discord.ext import commands

from autumn.core.config import EmbedColors
from autumn.core.constants import MAX_WARN_THRESHOLD, MIN_WARN_THRESHOLD
from autumn.core.database import StorageError
from autumn.core.database.models import EscalationConfig, WordFilterConfig
from autumn.utils.duration import DURATION_SUGGESTIONS, format_compact_duration, parse_duration
from autumn.utils.embeds import word_filter_action_label

from autumn.commands.moderation_helpers import report_storage_failure, respond

if TYPE_CHECKING:
    from autumn.bot import AutumnBot


INVALID_DURATION_MESSAGE = "Invalid duration. Use formats like `30m`, `12h`, `7d` or `1d12h`."

WORD_FILTER_ACTION_CHOICES = [
    app_commands.Choice(name=word_filter_action_label(value), value=value)
    for value in ("log_only", "delete_and_log", "warn_and_log", "timeout_delete_and_log")
]

MANAGE_GUILD = discord.Permissions(manage_guild=True)


def _enabled_label(enabled: bool) -> str:
    return "Enabled" if enabled else "Disabled"


async def duration_autocomplete(
    interaction: discord.Interaction,
    current: str,
) -> List[app_commands.Choice[str]]:
    """Suggest window durations, leading with the typed value if it parses."""
    current_lower = current.lower().strip()
    if not current_lower:
        return [app_commands.Choice(name=label, value=value) for label, value in DURATION_SUGGESTIONS]

    choices = []
    parsed = parse_duration(current)
    if parsed is not None:
        choices.append(app_commands.Choice(name=format_compact_duration(parsed), value=current_lower))

    for label, value in DURATION_SUGGESTIONS:
        if value == current_lower:
            continue
        if current_lower in label.lower() or current_lower in value:
            choices.append(app_commands.Choice(name=label, value=value))

    return choices[:25]


class SettingsCog(commands.Cog):
    """Cog for guild moderation settings."""

    escalation = app_commands.Group(
        name="escalation",
        description="Automatic timeout escalation settings",
        guild_only=True,
        default_permissions=MANAGE_GUILD,
    )
    modlogchannel = app_commands.Group(
        name="modlogchannel",
        description="Channel that receives moderation case logs",
        guild_only=True,
        default_permissions=MANAGE_GUILD,
    )
    wordfilter = app_commands.Group(
        name="wordfilter",
        description="Word filter settings",
        guild_only=True,
        default_permissions=MANAGE_GUILD,
    )

    def __init__(self, bot: "AutumnBot") -> None:
        self.bot = bot
        self.db = bot.db

    # =========================================================================
    # /escalation
    # =========================================================================

    @escalation.command(name="show", description="Show escalation settings")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def escalation_show(self, interaction: discord.Interaction) -> None:
        try:
            config = await self.db.get_escalation_config(interaction.guild_id)
        except StorageError as e:
            await report_storage_failure(interaction, "Escalation Show", e)
            return

        config = config or EscalationConfig(guild_id=interaction.guild_id)

        embed = discord.Embed(title="Escalation Settings", color=EmbedColors.INFO)
        embed.add_field(name="Status", value=_enabled_label(config.enabled), inline=True)
        embed.add_field(name="Warn Threshold", value=f"`{config.warn_threshold}`", inline=True)
        embed.add_field(
            name="Warn Window",
            value=format_compact_duration(config.warn_window_seconds),
            inline=True,
        )
        embed.add_field(
            name="Timeout Window",
            value=format_compact_duration(config.timeout_window_seconds),
            inline=True,
        )
        embed.add_field(
            name="Tiers",
            value="5m → 30m → 2h → 1d → 7d",
            inline=False,
        )
        await respond(interaction, embed=embed, ephemeral=True)

    @escalation.command(name="enable", description="Enable automatic escalation")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def escalation_enable(self, interaction: discord.Interaction) -> None:
        try:
            await self.db.set_escalation_enabled(interaction.guild_id, True)
        except StorageError as e:
            await report_storage_failure(interaction, "Escalation Enable", e)
            return
        await respond(interaction, "Escalation enabled.", ephemeral=True)

    @escalation.command(name="disable", description="Disable automatic escalation")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def escalation_disable(self, interaction: discord.Interaction) -> None:
        try:
            await self.db.set_escalation_enabled(interaction.guild_id, False)
        except StorageError as e:
            await report_storage_failure(interaction, "Escalation Disable", e)
            return
        await respond(interaction, "Escalation disabled.", ephemeral=True)

    @escalation.command(name="threshold", description="Warnings inside the window that trigger a timeout")
    @app_commands.describe(count="Number of warnings (1-100)")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def escalation_threshold(self, interaction: discord.Interaction, count: int) -> None:
        if not MIN_WARN_THRESHOLD <= count <= MAX_WARN_THRESHOLD:
            await respond(
                interaction,
                f"Threshold must be between {MIN_WARN_THRESHOLD} and {MAX_WARN_THRESHOLD}.",
                ephemeral=True,
            )
            return

        try:
            await self.db.set_warn_threshold(interaction.guild_id, count)
        except StorageError as e:
            await report_storage_failure(interaction, "Escalation Threshold", e)
            return
        await respond(interaction, f"Warn threshold set to {count}.", ephemeral=True)

    @escalation.command(name="warnwindow", description="How far back warnings are counted")
    @app_commands.describe(duration="e.g. 24h, 7d")
    @app_commands.autocomplete(duration=duration_autocomplete)
    @app_commands.checks.has_permissions(manage_guild=True)
    async def escalation_warnwindow(self, interaction: discord.Interaction, duration: str) -> None:
        seconds = parse_duration(duration)
        if seconds is None:
            await respond(interaction, INVALID_DURATION_MESSAGE, ephemeral=True)
            return

        try:
            await self.db.set_warn_window(interaction.guild_id, seconds)
        except StorageError as e:
            await report_storage_failure(interaction, "Escalation Warn Window", e)
            return
        await respond(interaction, f"Warn window set to {format_compact_duration(seconds)}.", ephemeral=True)

    @escalation.command(name="timeoutwindow", description="How far back prior timeouts raise the tier")
    @app_commands.describe(duration="e.g. 7d, 30d")
    @app_commands.autocomplete(duration=duration_autocomplete)
    @app_commands.checks.has_permissions(manage_guild=True)
    async def escalation_timeoutwindow(self, interaction: discord.Interaction, duration: str) -> None:
        seconds = parse_duration(duration)
        if seconds is None:
            await respond(interaction, INVALID_DURATION_MESSAGE, ephemeral=True)
            return

        try:
            await self.db.set_timeout_window(interaction.guild_id, seconds)
        except StorageError as e:
            await report_storage_failure(interaction, "Escalation Timeout Window", e)
            return
        await respond(interaction, f"Timeout window set to {format_compact_duration(seconds)}.", ephemeral=True)

    # =========================================================================
    # /modlogchannel
    # =========================================================================

    @modlogchannel.command(name="set", description="Send case logs to a channel")
    @app_commands.describe(channel="Log channel")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def modlogchannel_set(self, interaction: discord.Interaction, channel: discord.TextChannel) -> None:
        try:
            await self.db.set_modlog_channel_id(interaction.guild_id, channel.id)
        except StorageError as e:
            await report_storage_failure(interaction, "Modlog Channel Set", e)
            return
        await respond(interaction, f"Moderation logs will be posted in {channel.mention}.", ephemeral=True)

    @modlogchannel.command(name="clear", description="Stop posting case logs")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def modlogchannel_clear(self, interaction: discord.Interaction) -> None:
        try:
            await self.db.clear_modlog_channel_id(interaction.guild_id)
        except StorageError as e:
            await report_storage_failure(interaction, "Modlog Channel Clear", e)
            return
        await respond(interaction, "Moderation log channel cleared.", ephemeral=True)

    # =========================================================================
    # /wordfilter
    # =========================================================================

    @wordfilter.command(name="show", description="Show word filter settings")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def wordfilter_show(self, interaction: discord.Interaction) -> None:
        try:
            config = await self.db.get_word_filter_config(interaction.guild_id)
            words = await self.db.get_filter_words(interaction.guild_id)
        except StorageError as e:
            await report_storage_failure(interaction, "Word Filter Show", e)
            return

        config = config or WordFilterConfig(guild_id=interaction.guild_id)

        embed = discord.Embed(title="Word Filter Settings", color=EmbedColors.INFO)
        embed.add_field(name="Status", value=_enabled_label(config.enabled), inline=True)
        embed.add_field(name="Action", value=word_filter_action_label(config.action), inline=True)
        embed.add_field(name="Words", value=f"`{len(words)}`", inline=True)
        if words:
            listing = ", ".join(words)
            if len(listing) > 1000:
                listing = listing[:997] + "..."
            embed.add_field(name="List", value=f"||{listing}||", inline=False)
        await respond(interaction, embed=embed, ephemeral=True)

    @wordfilter.command(name="enable", description="Enable the word filter")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def wordfilter_enable(self, interaction: discord.Interaction) -> None:
        try:
            await self.db.set_word_filter_enabled(interaction.guild_id, True)
        except StorageError as e:
            await report_storage_failure(interaction, "Word Filter Enable", e)
            return
        await respond(interaction, "Word filter enabled.", ephemeral=True)

    @wordfilter.command(name="disable", description="Disable the word filter")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def wordfilter_disable(self, interaction: discord.Interaction) -> None:
        try:
            await self.db.set_word_filter_enabled(interaction.guild_id, False)
        except StorageError as e:
            await report_storage_failure(interaction, "Word Filter Disable", e)
            return
        await respond(interaction, "Word filter disabled.", ephemeral=True)

    @wordfilter.command(name="action", description="What happens when a filtered word is sent")
    @app_commands.describe(action="Action to take")
    @app_commands.choices(action=WORD_FILTER_ACTION_CHOICES)
    @app_commands.checks.has_permissions(manage_guild=True)
    async def wordfilter_action(
        self,
        interaction: discord.Interaction,
        action: app_commands.Choice[str],
    ) -> None:
        try:
            await self.db.set_word_filter_action(interaction.guild_id, action.value)
        except StorageError as e:
            await report_storage_failure(interaction, "Word Filter Action", e)
            return
        await respond(interaction, f"Word filter action set to **{action.name}**.", ephemeral=True)

    @wordfilter.command(name="add", description="Add a word to the filter")
    @app_commands.describe(word="A single word (letters and numbers only)")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def wordfilter_add(self, interaction: discord.Interaction, word: str) -> None:
        word = word.strip().lower()
        if not word or not word.isalnum():
            await respond(interaction, "Filter words must be a single word of letters and numbers.", ephemeral=True)
            return

        try:
            added = await self.db.add_filter_word(interaction.guild_id, word)
        except StorageError as e:
            await report_storage_failure(interaction, "Word Filter Add", e)
            return

        if not added:
            await respond(interaction, f"`{word}` is already filtered.", ephemeral=True)
            return
        await respond(interaction, f"Added `{word}` to the filter.", ephemeral=True)

    @wordfilter.command(name="remove", description="Remove a word from the filter")
    @app_commands.describe(word="Word to remove")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def wordfilter_remove(self, interaction: discord.Interaction, word: str) -> None:
        word = word.strip().lower()
        try:
            removed = await self.db.remove_filter_word(interaction.guild_id, word)
        except StorageError as e:
            await report_storage_failure(interaction, "Word Filter Remove", e)
            return

        if not removed:
            await respond(interaction, f"`{word}` is not in the filter.", ephemeral=True)
            return
        await respond(interaction, f"Removed `{word}` from the filter.", ephemeral=True)

    @wordfilter.command(name="preset", description="Load the built-in slur list")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def wordfilter_preset(self, interaction: discord.Interaction) -> None:
        try:
            added = await self.db.load_preset_words(interaction.guild_id)
        except StorageError as e:
            await report_storage_failure(interaction, "Word Filter Preset", e)
            return
        await respond(interaction, f"Loaded preset list: {added} new word(s) added.", ephemeral=True)
