"""
Autumn Moderation Bot - Escalation Service
==========================================

Automatic timeouts for users who collect too many warnings.

DESIGN:
    Called after every warning (manual /warn or the word filter). When
    the user's warnings inside the guild's window reach the threshold,
    a timeout is applied whose length depends on how many timeouts the
    user already received inside the timeout window:

        0 prior -> 5m, 1 -> 30m, 2 -> 2h, 3 -> 1d, 4+ -> 7d

    The tier is recomputed from case history every time; nothing is
    kept in memory. The check is not de-duplicated: every further
    warning while the user is at or over the threshold escalates again.

    check_and_escalate never raises. Store failures before the decision
    abort with None; anything after the timeout is attempted is logged
    and the result is still returned.
"""

from typing import Optional, TYPE_CHECKING

import discord

from autumn.core.database import StorageError
from autumn.core.database.models import CASE_STATUS_COMPLETED, EscalationResult, NewCase
from autumn.core.logger import logger
from autumn.utils.async_utils import gather_with_logging
from autumn.utils.duration import format_compact_duration
from autumn.utils.embeds import build_auto_timeout_embed

if TYPE_CHECKING:
    from autumn.core.database import DatabaseManager
    from autumn.services.moderation_sink import DiscordModerationSink


ESCALATION_TIERS = (300, 1800, 7200, 86400)
MAX_TIER_SECONDS = 604800

AUTO_TIMEOUT_ACTION = "auto_timeout"


def escalation_timeout_seconds(previous_timeouts: int) -> int:
    """
    Timeout length for a user with ``previous_timeouts`` recent timeouts.

    Negative counts are treated as zero.
    """
    tier = max(int(previous_timeouts), 0)
    if tier < len(ESCALATION_TIERS):
        return ESCALATION_TIERS[tier]
    return MAX_TIER_SECONDS


class EscalationService:
    """Warning threshold checks and the resulting auto-timeouts."""

    def __init__(self, db: "DatabaseManager", sink: "DiscordModerationSink") -> None:
        self.db = db
        self.sink = sink

    async def check_and_escalate(
        self,
        guild_id: int,
        target_user: discord.abc.User,
        bot_user_id: int,
    ) -> Optional[EscalationResult]:
        """
        Time the user out if they reached the guild's warning threshold.

        Args:
            guild_id: Guild the warning was issued in.
            target_user: User who was just warned.
            bot_user_id: Recorded as the moderator of the auto_timeout case.

        Returns:
            EscalationResult when a timeout was applied (or attempted),
            None when escalation is disabled, below threshold, or the
            store could not be read.
        """
        try:
            config = await self.db.get_escalation_if_enabled(guild_id)
            if config is None:
                return None

            warn_count = await self.db.count_warnings_in_window(
                guild_id, target_user.id, config.warn_window_seconds,
            )
            if warn_count < config.warn_threshold:
                return None

            timeout_count = await self.db.count_timeouts_in_window(
                guild_id, target_user.id, config.timeout_window_seconds,
            )
        except StorageError as e:
            logger.error("Escalation Check Failed", [
                ("Guild ID", str(guild_id)),
                ("User ID", str(target_user.id)),
                ("Error", str(e)[:100]),
            ])
            return None

        timeout_seconds = escalation_timeout_seconds(timeout_count)
        reason = (
            f"Auto-escalation: {warn_count} warning(s) in "
            f"{format_compact_duration(config.warn_window_seconds)}"
        )

        logger.tree("Escalation Triggered", [
            ("Guild ID", str(guild_id)),
            ("User", f"{target_user.name} ({target_user.id})"),
            ("Warnings", f"{warn_count}/{config.warn_threshold}"),
            ("Prior Timeouts", str(timeout_count)),
            ("Timeout", format_compact_duration(timeout_seconds)),
        ], emoji="⏫")

        try:
            await self.sink.apply_timeout(guild_id, target_user.id, timeout_seconds, reason)
        except Exception as e:
            logger.error("Auto Timeout Failed", [
                ("Guild ID", str(guild_id)),
                ("User ID", str(target_user.id)),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:100]),
            ])

        result = EscalationResult(
            timed_out=True,
            timeout_seconds=timeout_seconds,
            tier=timeout_count,
        )

        try:
            result.case = await self.db.create_case(NewCase(
                guild_id=guild_id,
                target_user_id=target_user.id,
                moderator_user_id=bot_user_id,
                action=AUTO_TIMEOUT_ACTION,
                reason=reason,
                status=CASE_STATUS_COMPLETED,
                duration_seconds=timeout_seconds,
            ))
        except StorageError as e:
            logger.error("Auto Timeout Case Failed", [
                ("Guild ID", str(guild_id)),
                ("User ID", str(target_user.id)),
                ("Error", str(e)[:100]),
            ])
            return result

        await gather_with_logging(
            ("Publish Case", self.sink.publish_case(
                guild_id,
                build_auto_timeout_embed(result.case, reason, timeout_seconds),
            )),
            ("DM User", self.sink.send_dm(
                target_user,
                guild_id,
                "automatically timed out",
                reason,
                format_compact_duration(timeout_seconds),
            )),
            context="Escalation",
        )

        return result


__all__ = [
    "ESCALATION_TIERS",
    "escalation_timeout_seconds",
    "EscalationService",
]
