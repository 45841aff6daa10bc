"""
Autumn Moderation Bot - Settings Command Package
================================================

Per-guild escalation, modlog channel and word filter settings.
"""

from typing import TYPE_CHECKING

from autumn.core.logger import logger

from .cog import SettingsCog

if TYPE_CHECKING:
    from autumn.bot import AutumnBot


async def setup(bot: "AutumnBot") -> None:
    """Load the Settings cog."""
    await bot.add_cog(SettingsCog(bot))
    logger.tree("Settings Cog Loaded", [
        ("Commands", "/escalation, /modlogchannel, /wordfilter"),
    ], emoji="⚙️")


__all__ = ["SettingsCog", "setup"]
