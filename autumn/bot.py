"""
Autumn Moderation Bot - Main Bot Class
======================================

Discord client that wires the database, moderation services and cogs.

SERVICE INITIALIZATION ORDER (setup_hook, before on_ready):
    1. Database connect + schema / case-label migration
    2. Moderation sink, escalation service, word filter service
    3. Command cogs, then event cogs
    4. Command tree sync (dev guild if configured, else global)
"""

from datetime import datetime
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from autumn.core.config import Config, get_config
from autumn.core.database import DatabaseManager, get_db
from autumn.core.logger import logger
from autumn.services import DiscordModerationSink, EscalationService, WordFilterService


# =============================================================================
# AutumnBot Class
# =============================================================================

class AutumnBot(commands.Bot):
    """
    Main Discord bot class.

    DESIGN: Central orchestrator that:
    - Owns the DatabaseManager and the moderation services
    - Exposes them to cogs as bot.db / bot.sink / bot.escalation / bot.word_filter
    - Manages bot lifecycle (startup, shutdown)
    """

    def __init__(self, config: Optional[Config] = None, db: Optional[DatabaseManager] = None) -> None:
        self.config = config or get_config()

        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True

        super().__init__(
            command_prefix=self.config.command_prefix,
            intents=intents,
            help_command=None,
        )

        self.db = db or get_db()
        self.start_time: datetime = datetime.now()

        self.sink = DiscordModerationSink(self, self.db)
        self.escalation = EscalationService(self.db, self.sink)
        self.word_filter = WordFilterService(self.db, self.sink, self.escalation)

        logger.info("Bot Instance Created")

    # =========================================================================
    # Setup Hook
    # =========================================================================

    async def setup_hook(self) -> None:
        """Initialize the database, load cogs and sync commands before on_ready."""
        await self.db.initialize()

        self.tree.on_error = self.on_app_command_error

        from autumn.commands import COMMAND_COGS
        for cog in COMMAND_COGS:
            try:
                await self.load_extension(cog)
                logger.info(f"Cog Loaded: {cog.split('.')[-1]}")
            except Exception as e:
                logger.error("Failed to Load Cog", [("Cog", cog), ("Error", str(e))])

        from autumn.events import EVENT_COGS
        for cog in EVENT_COGS:
            try:
                await self.load_extension(cog)
                logger.debug(f"Event Cog Loaded: {cog.split('.')[-1]}")
            except Exception as e:
                logger.error("Failed to Load Event Cog", [("Cog", cog), ("Error", str(e))])

        try:
            if self.config.dev_guild_id:
                guild = discord.Object(id=self.config.dev_guild_id)
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                target = f"guild {self.config.dev_guild_id}"
            else:
                synced = await self.tree.sync()
                target = "global"
            logger.tree("Commands Synced", [
                ("Count", str(len(synced))),
                ("Target", target),
            ], emoji="✅")
        except discord.HTTPException as e:
            logger.error("Command Sync Failed", [("Error", str(e))])

        logger.success("Setup Complete")

    # =========================================================================
    # Events
    # =========================================================================

    async def on_ready(self) -> None:
        if not self.user:
            return

        logger.tree_nested("BOT ONLINE", [
            ("Bot", [
                ("Name", self.user.name),
                ("ID", str(self.user.id)),
                ("Guilds", str(len(self.guilds))),
            ]),
            ("Storage", [
                ("Backend", self.db.backend.dialect),
                ("Cache", self.db.cache.backend_name),
            ]),
        ], emoji="🚀")

    async def on_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError,
    ) -> None:
        """Tree-wide handler for errors not handled inside a command."""
        if isinstance(error, app_commands.CheckFailure):
            message = "You don't have permission to use this command."
        else:
            command = interaction.command.qualified_name if interaction.command else "unknown"
            original = getattr(error, "original", error)
            logger.error("App Command Failed", [
                ("Command", f"/{command}"),
                ("User", f"{interaction.user.name} ({interaction.user.id})"),
                ("Error Type", type(original).__name__),
                ("Error", str(original)[:100]),
            ])
            message = "An unexpected error occurred."

        try:
            if interaction.response.is_done():
                await interaction.followup.send(message, ephemeral=True)
            else:
                await interaction.response.send_message(message, ephemeral=True)
        except discord.HTTPException:
            pass  # interaction expired

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def close(self) -> None:
        """Close the Discord connection, then the database and cache."""
        logger.info("Initiating Graceful Shutdown")

        await super().close()
        await self.db.close()

        logger.tree("SHUTDOWN COMPLETE", [
            ("Uptime", str(datetime.now() - self.start_time)),
        ], emoji="🛑")


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["AutumnBot"]
