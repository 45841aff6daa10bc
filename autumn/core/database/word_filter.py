"""
Autumn Moderation Bot - Word Filter Store
=========================================

Per-guild word filter config and word list, read through the config cache.

Words are stored lowercase and unique per guild. The list is cached
separately from the config; both keys are dropped on every write.
"""

from typing import Iterable, List, Optional, TYPE_CHECKING

from autumn.core.database.models import WORD_FILTER_ACTIONS, WordFilterConfig
from autumn.core.logger import logger
from autumn.utils.cache import word_filter_config_key, word_filter_words_key

if TYPE_CHECKING:
    from autumn.core.database.manager import DatabaseManager


WORD_LIST_CACHE_TTL = 300

PRESET_WORDS = (
    "nigger",
    "nigga",
    "faggot",
    "fag",
    "retard",
    "retarded",
    "tranny",
    "kike",
    "spic",
    "wetback",
    "chink",
    "gook",
    "coon",
    "darkie",
    "paki",
    "beaner",
    "cracker",
    "dyke",
    "homo",
    "shemale",
    "twink",
    "negro",
    "raghead",
    "towelhead",
    "sandnigger",
    "zipperhead",
    "slant",
    "jap",
    "redskin",
    "squaw",
    "chinaman",
    "gringo",
    "wop",
    "dago",
    "kraut",
    "honky",
    "halfbreed",
    "mongoloid",
    "tard",
    "sperg",
    "autist",
)
"""Slurs loaded by /wordfilter preset."""


class WordFilterMixin:
    """Mixin for word filter storage."""

    # =========================================================================
    # Config
    # =========================================================================

    async def get_word_filter_config(self: "DatabaseManager", guild_id: int) -> Optional[WordFilterConfig]:
        async def load() -> Optional[dict]:
            row = await self.backend.fetchone(
                "SELECT guild_id, enabled, action FROM word_filter_config WHERE guild_id = ?",
                (guild_id,),
            )
            return WordFilterConfig.from_row(row).to_dict() if row else None

        data = await self.cache.get_or_load(
            word_filter_config_key(self.cache, guild_id),
            self.config_cache_ttl,
            load,
        )
        return WordFilterConfig(**data) if data else None

    async def get_word_filter_if_enabled(self: "DatabaseManager", guild_id: int) -> Optional[WordFilterConfig]:
        config = await self.get_word_filter_config(guild_id)
        if config is None or not config.enabled:
            return None
        return config

    async def set_word_filter_enabled(self: "DatabaseManager", guild_id: int, enabled: bool) -> None:
        await self.backend.execute(
            """INSERT INTO word_filter_config (guild_id, enabled) VALUES (?, ?)
               ON CONFLICT (guild_id) DO UPDATE SET enabled = EXCLUDED.enabled""",
            (guild_id, bool(enabled)),
        )
        await self._invalidate_word_filter(guild_id)

        logger.tree("Word Filter Toggled", [
            ("Guild ID", str(guild_id)),
            ("Enabled", str(bool(enabled))),
        ], emoji="🚫")

    async def set_word_filter_action(self: "DatabaseManager", guild_id: int, action: str) -> None:
        """
        Set the action taken on a match.

        Raises:
            ValueError: If ``action`` is not a known word filter action.
        """
        if action not in WORD_FILTER_ACTIONS:
            raise ValueError(f"Unknown word filter action: {action}")

        await self.backend.execute(
            """INSERT INTO word_filter_config (guild_id, action) VALUES (?, ?)
               ON CONFLICT (guild_id) DO UPDATE SET action = EXCLUDED.action""",
            (guild_id, action),
        )
        await self._invalidate_word_filter(guild_id)

        logger.tree("Word Filter Action Set", [
            ("Guild ID", str(guild_id)),
            ("Action", action),
        ], emoji="🚫")

    # =========================================================================
    # Words
    # =========================================================================

    async def _insert_filter_word(
        self: "DatabaseManager",
        guild_id: int,
        word: str,
        is_preset: bool,
    ) -> bool:
        async with self.backend.transaction() as tx:
            row = await tx.fetchone(
                """INSERT INTO word_filter_words (guild_id, word, is_preset, created_at)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT (guild_id, word) DO NOTHING
                   RETURNING id""",
                (guild_id, word.strip().lower(), is_preset, self.now()),
            )
        return row is not None

    async def add_filter_word(self: "DatabaseManager", guild_id: int, word: str) -> bool:
        """
        Add a word to the guild's list.

        Returns:
            True if added, False if it was already present.
        """
        added = await self._insert_filter_word(guild_id, word, False)
        await self._invalidate_word_filter(guild_id)
        return added

    async def remove_filter_word(self: "DatabaseManager", guild_id: int, word: str) -> bool:
        """
        Remove a word from the guild's list.

        Returns:
            True if removed, False if it was not present.
        """
        async with self.backend.transaction() as tx:
            row = await tx.fetchone(
                "DELETE FROM word_filter_words WHERE guild_id = ? AND word = ? RETURNING id",
                (guild_id, word.strip().lower()),
            )
        await self._invalidate_word_filter(guild_id)
        return row is not None

    async def get_filter_words(self: "DatabaseManager", guild_id: int) -> List[str]:
        """The guild's filtered words, sorted alphabetically."""

        async def load() -> List[str]:
            rows = await self.backend.fetchall(
                "SELECT word FROM word_filter_words WHERE guild_id = ? ORDER BY word ASC",
                (guild_id,),
            )
            return [row["word"] for row in rows]

        return await self.cache.get_or_load(
            word_filter_words_key(self.cache, guild_id),
            WORD_LIST_CACHE_TTL,
            load,
        )

    async def load_preset_words(
        self: "DatabaseManager",
        guild_id: int,
        words: Iterable[str] = PRESET_WORDS,
    ) -> int:
        """
        Add every preset word, skipping ones already present.

        Returns:
            Number of words newly added.
        """
        inserted = 0
        for word in words:
            if await self._insert_filter_word(guild_id, word, True):
                inserted += 1

        if inserted:
            await self._invalidate_word_filter(guild_id)

        logger.tree("Preset Words Loaded", [
            ("Guild ID", str(guild_id)),
            ("Added", str(inserted)),
        ], emoji="📥")
        return inserted

    async def _invalidate_word_filter(self: "DatabaseManager", guild_id: int) -> None:
        await self.cache.invalidate(
            word_filter_config_key(self.cache, guild_id),
            word_filter_words_key(self.cache, guild_id),
        )
