"""
Autumn Moderation Bot - Modlog Config
=====================================

Per-guild moderation log channel, read through the config cache.
"""

from typing import Optional, TYPE_CHECKING

from autumn.core.logger import logger
from autumn.utils.cache import modlog_config_key

if TYPE_CHECKING:
    from autumn.core.database.manager import DatabaseManager


class ModlogMixin:
    """Mixin for modlog channel configuration."""

    async def get_modlog_channel_id(self: "DatabaseManager", guild_id: int) -> Optional[int]:
        async def load() -> Optional[int]:
            return await self.backend.fetchval(
                "SELECT modlog_channel_id FROM guild_mod_config WHERE guild_id = ?",
                (guild_id,),
            )

        channel_id = await self.cache.get_or_load(
            modlog_config_key(self.cache, guild_id),
            self.config_cache_ttl,
            load,
        )
        return int(channel_id) if channel_id is not None else None

    async def set_modlog_channel_id(self: "DatabaseManager", guild_id: int, channel_id: int) -> None:
        await self.backend.execute(
            """INSERT INTO guild_mod_config (guild_id, modlog_channel_id) VALUES (?, ?)
               ON CONFLICT (guild_id) DO UPDATE SET modlog_channel_id = EXCLUDED.modlog_channel_id""",
            (guild_id, channel_id),
        )
        await self.cache.invalidate(modlog_config_key(self.cache, guild_id))

        logger.tree("Modlog Channel Set", [
            ("Guild ID", str(guild_id)),
            ("Channel ID", str(channel_id)),
        ], emoji="📜")

    async def clear_modlog_channel_id(self: "DatabaseManager", guild_id: int) -> None:
        await self.backend.execute(
            "DELETE FROM guild_mod_config WHERE guild_id = ?",
            (guild_id,),
        )
        await self.cache.invalidate(modlog_config_key(self.cache, guild_id))

        logger.tree("Modlog Channel Cleared", [
            ("Guild ID", str(guild_id)),
        ], emoji="📜")
