"""
Autumn Moderation Bot - Message Events
======================================

Routes new guild messages through the word filter.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from autumn.core.logger import logger

if TYPE_CHECKING:
    from autumn.bot import AutumnBot


class MessageEvents(commands.Cog):
    """Message event handlers."""

    def __init__(self, bot: "AutumnBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if message.guild is None or message.author.bot or self.bot.user is None:
            return

        try:
            await self.bot.word_filter.handle_message(message, self.bot.user.id)
        except Exception as e:
            logger.error("Word Filter Handler Failed", [
                ("Guild ID", str(message.guild.id)),
                ("User", f"{message.author.name} ({message.author.id})"),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:100]),
            ])


async def setup(bot: "AutumnBot") -> None:
    """Add the message events cog to the bot."""
    await bot.add_cog(MessageEvents(bot))
    logger.debug("Message Events Loaded")
