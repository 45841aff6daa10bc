"""
Autumn Moderation Bot - Moderation Sink
=======================================

The side of moderation that touches Discord: timeouts, DMs and modlog
posts.

DESIGN:
    Every operation is best-effort and returns a bool. Discord failures
    are logged (403 as a warning, since it is almost always role
    hierarchy; other HTTP failures as errors) and never propagate, so
    a blocked DM or a missing log channel cannot undo a case that was
    already recorded.

    Services take the sink as a constructor argument; tests pass an
    AsyncMock with the same three coroutine methods.
"""

from datetime import timedelta
from typing import Optional, TYPE_CHECKING

import discord

from autumn.core.constants import MAX_TIMEOUT_SECONDS
from autumn.core.database import StorageError
from autumn.core.logger import logger
from autumn.utils.discord_errors import log_http_error
from autumn.utils.embeds import build_moderation_dm

if TYPE_CHECKING:
    from discord.ext import commands
    from autumn.core.database import DatabaseManager


class DiscordModerationSink:
    """
    Applies moderation side effects through the bot's Discord client.

    Args:
        bot: Logged-in bot (only its cache and HTTP helpers are used).
        db: Database used to resolve the modlog channel.
    """

    def __init__(self, bot: "commands.Bot", db: "DatabaseManager") -> None:
        self.bot = bot
        self.db = db

    def guild_name(self, guild_id: int) -> str:
        guild = self.bot.get_guild(guild_id)
        return guild.name if guild is not None else f"Server {guild_id}"

    # =========================================================================
    # Timeouts
    # =========================================================================

    async def apply_timeout(
        self,
        guild_id: int,
        user_id: int,
        seconds: int,
        reason: Optional[str] = None,
    ) -> bool:
        """
        Time a member out.

        Durations above Discord's 28 day cap are clamped.

        Returns:
            True if Discord accepted the timeout.
        """
        guild = self.bot.get_guild(guild_id)
        if guild is None:
            logger.warning("Timeout Skipped", [
                ("Guild ID", str(guild_id)),
                ("User ID", str(user_id)),
                ("Reason", "Guild not available"),
            ])
            return False

        seconds = max(1, min(int(seconds), MAX_TIMEOUT_SECONDS))

        try:
            member = guild.get_member(user_id)
            if member is None:
                member = await guild.fetch_member(user_id)
            await member.timeout(timedelta(seconds=seconds), reason=reason)
        except discord.HTTPException as e:
            log_http_error(e, "Apply Timeout", [
                ("Guild ID", str(guild_id)),
                ("User ID", str(user_id)),
                ("Duration", f"{seconds}s"),
            ])
            return False

        logger.tree("Timeout Applied", [
            ("Guild ID", str(guild_id)),
            ("User ID", str(user_id)),
            ("Duration", f"{seconds}s"),
            ("Reason", (reason or "None")[:50]),
        ], emoji="🔇")
        return True

    # =========================================================================
    # Direct Messages
    # =========================================================================

    async def send_dm(
        self,
        user: discord.abc.User,
        guild_id: int,
        action: str,
        reason: Optional[str] = None,
        duration: Optional[str] = None,
    ) -> bool:
        """
        DM the target of an action.

        Args:
            user: Recipient.
            guild_id: Guild the action happened in (used for its name).
            action: Past-tense action, e.g. "warned".
            reason: Optional reason line.
            duration: Optional pre-formatted duration.

        Returns:
            True if the DM was delivered.
        """
        embed = build_moderation_dm(self.guild_name(guild_id), action, reason, duration)

        try:
            await user.send(embed=embed)
        except discord.HTTPException as e:
            log_http_error(e, "Moderation DM", [
                ("User", f"{user.name} ({user.id})"),
                ("Action", action),
            ])
            return False

        logger.debug("Moderation DM Sent", [
            ("User", f"{user.name} ({user.id})"),
            ("Action", action),
        ])
        return True

    # =========================================================================
    # Modlog
    # =========================================================================

    async def publish_case(self, guild_id: int, embed: discord.Embed) -> bool:
        """
        Post an embed to the guild's modlog channel.

        Returns:
            True if posted; False if no channel is configured or posting failed.
        """
        try:
            channel_id = await self.db.get_modlog_channel_id(guild_id)
        except StorageError as e:
            logger.error("Modlog Channel Lookup Failed", [
                ("Guild ID", str(guild_id)),
                ("Error", str(e)[:100]),
            ])
            return False

        if channel_id is None:
            return False

        try:
            channel = self.bot.get_channel(channel_id)
            if channel is None:
                channel = await self.bot.fetch_channel(channel_id)
            if not isinstance(channel, discord.abc.Messageable):
                logger.warning("Modlog Channel Not Postable", [
                    ("Guild ID", str(guild_id)),
                    ("Channel ID", str(channel_id)),
                    ("Type", type(channel).__name__),
                ])
                return False
            await channel.send(embed=embed)
        except discord.HTTPException as e:
            log_http_error(e, "Modlog Publish", [
                ("Guild ID", str(guild_id)),
                ("Channel ID", str(channel_id)),
            ])
            return False

        return True


__all__ = ["DiscordModerationSink"]
