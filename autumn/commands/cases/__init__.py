"""
Autumn Moderation Bot - Cases Command Package
=============================================

Case lookup, reason edits, notes, history and the case list.
"""

from typing import TYPE_CHECKING

from autumn.core.logger import logger

from .cog import CasesCog

if TYPE_CHECKING:
    from autumn.bot import AutumnBot


async def setup(bot: "AutumnBot") -> None:
    """Load the Cases cog."""
    await bot.add_cog(CasesCog(bot))
    logger.tree("Cases Cog Loaded", [
        ("Commands", "/case view|reason|note|history, /modlogs"),
    ], emoji="📁")


__all__ = ["CasesCog", "setup"]
