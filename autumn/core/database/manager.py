"""
Autumn Moderation Bot - Database Manager
========================================

Central database manager composed from per-concern mixins.

DESIGN:
    DatabaseManager owns one backend (SQLite or PostgreSQL) and one
    CacheService. Mixins add the moderation operations and reach both
    through ``self.backend`` / ``self.cache``. The process-wide instance
    comes from get_db(); tests build their own with a temporary SQLite
    backend.
"""

from typing import Optional

from autumn.core.database.base import DatabaseBackend, DatabaseBase, backend_from_url
from autumn.core.database.cases import CasesMixin
from autumn.core.database.escalation import EscalationMixin
from autumn.core.database.modlog import ModlogMixin
from autumn.core.database.schema import SchemaMixin
from autumn.core.database.warnings import WarningsMixin
from autumn.core.database.word_filter import WordFilterMixin
from autumn.core.logger import logger
from autumn.utils.cache import CacheService, build_cache


# =============================================================================
# Database Manager
# =============================================================================

class DatabaseManager(
    SchemaMixin,
    CasesMixin,
    WarningsMixin,
    EscalationMixin,
    ModlogMixin,
    WordFilterMixin,
    DatabaseBase,
):
    """
    Moderation data access for the whole bot.

    Args:
        backend: Connected or unconnected storage backend.
        cache: Config cache; defaults to a disabled cache.
        config_cache_ttl: Seconds cached guild config stays valid.
    """

    def __init__(
        self,
        backend: DatabaseBackend,
        cache: Optional[CacheService] = None,
        config_cache_ttl: int = 900,
    ) -> None:
        self.backend = backend
        self.cache = cache if cache is not None else CacheService()
        self.config_cache_ttl = config_cache_ttl
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Connect, create tables and run the case-label migration."""
        if self._initialized:
            return

        await self.backend.connect()
        await self._init_tables()
        await self.ensure_case_schema_compat()
        self._initialized = True

        logger.tree("Database Manager Initialized", [
            ("Backend", self.backend.dialect),
            ("Cache", self.cache.backend_name),
            ("Config TTL", f"{self.config_cache_ttl}s"),
        ], emoji="🗄️")

    async def close(self) -> None:
        await self.backend.close()
        await self.cache.close()
        self._initialized = False


# =============================================================================
# Global Instance
# =============================================================================

_db: Optional[DatabaseManager] = None


def get_db() -> DatabaseManager:
    """
    Get the global database manager, building it from config on first use.

    The returned manager still needs ``await db.initialize()``.
    """
    global _db
    if _db is None:
        from autumn.core.config import get_config

        config = get_config()
        cache = build_cache(
            config.cache_backend,
            prefix=config.cache_prefix,
            default_ttl=config.config_cache_ttl,
            redis_url=config.redis_url,
        )
        _db = DatabaseManager(
            backend_from_url(config.database_url),
            cache=cache,
            config_cache_ttl=config.config_cache_ttl,
        )
    return _db
