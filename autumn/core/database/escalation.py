"""
Autumn Moderation Bot - Escalation Config
=========================================

Per-guild escalation policy, read through the config cache.

A guild without a row behaves as disabled. Setters upsert one column and
leave the rest at their current value (or the table default on first
write), then invalidate the cached copy.
"""

from typing import Any, Optional, TYPE_CHECKING

from autumn.core.database.models import EscalationConfig
from autumn.core.logger import logger
from autumn.utils.cache import escalation_config_key

if TYPE_CHECKING:
    from autumn.core.database.manager import DatabaseManager


ESCALATION_COLUMNS = (
    "enabled",
    "warn_threshold",
    "warn_window_seconds",
    "timeout_window_seconds",
)


class EscalationMixin:
    """Mixin for escalation config operations."""

    async def get_escalation_config(self: "DatabaseManager", guild_id: int) -> Optional[EscalationConfig]:
        """Return the guild's escalation config, or None if never configured."""

        async def load() -> Optional[dict]:
            row = await self.backend.fetchone(
                """SELECT guild_id, enabled, warn_threshold, warn_window_seconds, timeout_window_seconds
                   FROM escalation_config WHERE guild_id = ?""",
                (guild_id,),
            )
            return EscalationConfig.from_row(row).to_dict() if row else None

        data = await self.cache.get_or_load(
            escalation_config_key(self.cache, guild_id),
            self.config_cache_ttl,
            load,
        )
        return EscalationConfig(**data) if data else None

    async def get_escalation_if_enabled(self: "DatabaseManager", guild_id: int) -> Optional[EscalationConfig]:
        config = await self.get_escalation_config(guild_id)
        if config is None or not config.enabled:
            return None
        return config

    async def _upsert_escalation(self: "DatabaseManager", guild_id: int, column: str, value: Any) -> None:
        if column not in ESCALATION_COLUMNS:
            raise ValueError(f"Unknown escalation column: {column}")

        await self.backend.execute(
            f"""INSERT INTO escalation_config (guild_id, {column}) VALUES (?, ?)
                ON CONFLICT (guild_id) DO UPDATE SET {column} = EXCLUDED.{column}""",
            (guild_id, value),
        )
        await self.cache.invalidate(escalation_config_key(self.cache, guild_id))

        logger.tree("Escalation Config Updated", [
            ("Guild ID", str(guild_id)),
            ("Setting", column),
            ("Value", str(value)),
        ], emoji="⚙️")

    async def set_escalation_enabled(self: "DatabaseManager", guild_id: int, enabled: bool) -> None:
        await self._upsert_escalation(guild_id, "enabled", bool(enabled))

    async def set_warn_threshold(self: "DatabaseManager", guild_id: int, threshold: int) -> None:
        await self._upsert_escalation(guild_id, "warn_threshold", int(threshold))

    async def set_warn_window(self: "DatabaseManager", guild_id: int, window_seconds: int) -> None:
        await self._upsert_escalation(guild_id, "warn_window_seconds", int(window_seconds))

    async def set_timeout_window(self: "DatabaseManager", guild_id: int, window_seconds: int) -> None:
        await self._upsert_escalation(guild_id, "timeout_window_seconds", int(window_seconds))
