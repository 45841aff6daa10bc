"""
Autumn Moderation Bot - Word Filter Service
===========================================

Scans guild messages for filtered words and applies the guild's action.

DESIGN:
    Words match whole tokens only. Content is lowercased and split on
    every non-alphanumeric character, so "fag" never matches "leafage"
    but does match "fag!" or "...fag...".

    Actions:
    - log_only: record a case, leave the message
    - delete_and_log: delete the message
    - warn_and_log: delete, record a warning, DM, run escalation
    - timeout_delete_and_log: delete, 5 minute timeout, DM

    Every match records a completed word_filter_* case with the matched
    word as its reason and publishes it to the modlog.
"""

from typing import Iterable, Optional, TYPE_CHECKING

import discord

from autumn.core.constants import WORD_FILTER_TIMEOUT_SECONDS
from autumn.core.database import StorageError
from autumn.core.database.models import CASE_STATUS_COMPLETED, CaseSummary, NewCase
from autumn.core.logger import logger
from autumn.utils.discord_errors import log_http_error
from autumn.utils.duration import format_compact_duration
from autumn.utils.embeds import build_word_filter_embed, word_filter_action_label

if TYPE_CHECKING:
    from autumn.core.database import DatabaseManager
    from autumn.services.escalation import EscalationService
    from autumn.services.moderation_sink import DiscordModerationSink


DELETING_ACTIONS = ("delete_and_log", "warn_and_log", "timeout_delete_and_log")

CASE_ACTIONS = {
    "timeout_delete_and_log": "word_filter_timeout",
    "delete_and_log": "word_filter_delete",
    "warn_and_log": "word_filter_warn",
}


def tokenize(content: str) -> set:
    """Lowercase alphanumeric tokens of a message."""
    cleaned = "".join(c if c.isalnum() else " " for c in (content or "").lower())
    return set(cleaned.split())


def find_filtered_word(content: str, words: Iterable[str]) -> Optional[str]:
    """First filtered word (in list order) present as a whole token, else None."""
    tokens = tokenize(content)
    if not tokens:
        return None
    for word in words:
        if word in tokens:
            return word
    return None


def case_action_for(action: str) -> str:
    return CASE_ACTIONS.get(action, "word_filter_log")


class WordFilterService:
    """Applies the per-guild word filter to incoming messages."""

    def __init__(
        self,
        db: "DatabaseManager",
        sink: "DiscordModerationSink",
        escalation: "EscalationService",
    ) -> None:
        self.db = db
        self.sink = sink
        self.escalation = escalation

    async def handle_message(self, message: discord.Message, bot_user_id: int) -> Optional[CaseSummary]:
        """
        Check one message and act on a match.

        Args:
            message: Incoming message.
            bot_user_id: Recorded as moderator for warnings and cases.

        Returns:
            The recorded case, or None if nothing matched (or it could
            not be recorded).
        """
        if message.author.bot or message.webhook_id is not None or message.guild is None:
            return None

        guild_id = message.guild.id

        try:
            config = await self.db.get_word_filter_if_enabled(guild_id)
            if config is None:
                return None
            words = await self.db.get_filter_words(guild_id)
        except StorageError as e:
            logger.error("Word Filter Load Failed", [
                ("Guild ID", str(guild_id)),
                ("Error", str(e)[:100]),
            ])
            return None

        matched = find_filtered_word(message.content, words)
        if matched is None:
            return None

        action = config.action
        author = message.author

        logger.tree("Word Filter Match", [
            ("Guild ID", str(guild_id)),
            ("User", f"{author.name} ({author.id})"),
            ("Word", matched),
            ("Action", word_filter_action_label(action)),
        ], emoji="🚫")

        if action in DELETING_ACTIONS:
            await self._delete_message(message)

        if action == "warn_and_log":
            await self._warn(guild_id, author, matched, bot_user_id)
        elif action == "timeout_delete_and_log":
            await self._timeout(guild_id, author, matched)

        try:
            case = await self.db.create_case(NewCase(
                guild_id=guild_id,
                target_user_id=author.id,
                moderator_user_id=bot_user_id,
                action=case_action_for(action),
                reason=matched,
                status=CASE_STATUS_COMPLETED,
                duration_seconds=WORD_FILTER_TIMEOUT_SECONDS if action == "timeout_delete_and_log" else None,
            ))
        except StorageError as e:
            logger.error("Word Filter Case Failed", [
                ("Guild ID", str(guild_id)),
                ("User ID", str(author.id)),
                ("Error", str(e)[:100]),
            ])
            return None

        await self.sink.publish_case(guild_id, build_word_filter_embed(case, matched, action))
        return case

    # =========================================================================
    # Actions
    # =========================================================================

    async def _delete_message(self, message: discord.Message) -> None:
        try:
            await message.delete()
        except discord.NotFound:
            pass  # already gone
        except discord.HTTPException as e:
            log_http_error(e, "Delete Filtered Message", [
                ("Channel ID", str(message.channel.id)),
                ("User ID", str(message.author.id)),
            ])

    async def _warn(self, guild_id: int, author: discord.abc.User, word: str, bot_user_id: int) -> None:
        reason = f"Word filter: {word}"

        try:
            await self.db.record_warning(guild_id, author.id, bot_user_id, reason)
        except StorageError as e:
            logger.error("Word Filter Warning Failed", [
                ("Guild ID", str(guild_id)),
                ("User ID", str(author.id)),
                ("Error", str(e)[:100]),
            ])

        await self.sink.send_dm(author, guild_id, "warned", reason, None)
        await self.escalation.check_and_escalate(guild_id, author, bot_user_id)

    async def _timeout(self, guild_id: int, author: discord.abc.User, word: str) -> None:
        reason = f"Word filter: {word}"
        await self.sink.apply_timeout(guild_id, author.id, WORD_FILTER_TIMEOUT_SECONDS, reason)
        await self.sink.send_dm(
            author,
            guild_id,
            "timed out",
            reason,
            format_compact_duration(WORD_FILTER_TIMEOUT_SECONDS),
        )


__all__ = [
    "tokenize",
    "find_filtered_word",
    "case_action_for",
    "WordFilterService",
]
