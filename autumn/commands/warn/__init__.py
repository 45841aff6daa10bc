"""
Autumn Moderation Bot - Warn Command Package
============================================

Warning commands with case logging and automatic escalation.
"""

from typing import TYPE_CHECKING

from autumn.core.logger import logger

from .cog import WarnCog

if TYPE_CHECKING:
    from autumn.bot import AutumnBot


async def setup(bot: "AutumnBot") -> None:
    """Load the Warn cog."""
    await bot.add_cog(WarnCog(bot))
    logger.tree("Warn Cog Loaded", [
        ("Commands", "/warn, /warnings, /unwarn"),
        ("Features", "case logging, DM notify, escalation"),
    ], emoji="📋")


__all__ = ["WarnCog", "setup"]
