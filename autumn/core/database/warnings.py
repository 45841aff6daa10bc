"""
Autumn Moderation Bot - Warning Store
=====================================

Append-only warning records with time-windowed counts.

DESIGN:
    Escalation reads the count inside a rolling window, while the
    "warned #N" number shown to moderators is the user's total count.
    Warnings are removed by their 1-based position in (warned_at, id)
    order; the ranking is computed inside the DELETE itself.
"""

from typing import List, TYPE_CHECKING

from autumn.core.constants import MAX_STORED_INT
from autumn.core.database.models import WarningEntry, WarningRecord
from autumn.core.logger import logger
from autumn.utils.formatting import truncate

if TYPE_CHECKING:
    from autumn.core.database.manager import DatabaseManager


WARNING_COLUMNS = "id, guild_id, user_id, moderator_id, reason, warned_at"


class WarningsMixin:
    """Mixin for warning-related database operations."""

    async def record_warning(
        self: "DatabaseManager",
        guild_id: int,
        user_id: int,
        moderator_id: int,
        reason: str,
    ) -> WarningRecord:
        """
        Add a warning.

        Returns:
            WarningRecord whose warn_number is the user's total warning
            count in the guild, including this one.
        """
        now = self.now()

        async with self.backend.transaction() as tx:
            await tx.execute(
                """INSERT INTO warnings (guild_id, user_id, moderator_id, reason, warned_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (guild_id, user_id, moderator_id, reason, now),
            )
            total = await tx.fetchval(
                "SELECT COUNT(*) FROM warnings WHERE guild_id = ? AND user_id = ?",
                (guild_id, user_id),
            )

        record = WarningRecord(warn_number=int(total))

        logger.tree("Warning Recorded", [
            ("Guild ID", str(guild_id)),
            ("User ID", str(user_id)),
            ("Moderator ID", str(moderator_id)),
            ("Warn #", str(record.warn_number)),
            ("Reason", truncate(reason, 50)),
        ], emoji="⚠️")

        return record

    async def warnings_since(
        self: "DatabaseManager",
        guild_id: int,
        user_id: int,
        since: int,
    ) -> List[WarningEntry]:
        """Warnings with warned_at >= since, oldest first."""
        rows = await self.backend.fetchall(
            f"""SELECT {WARNING_COLUMNS} FROM warnings
                WHERE guild_id = ? AND user_id = ? AND warned_at >= ?
                ORDER BY warned_at ASC, id ASC""",
            (guild_id, user_id, since),
        )
        return [WarningEntry.from_row(row) for row in rows]

    async def list_warnings(self: "DatabaseManager", guild_id: int, user_id: int) -> List[WarningEntry]:
        """All warnings for a user, oldest first (index + 1 is the warning number)."""
        rows = await self.backend.fetchall(
            f"""SELECT {WARNING_COLUMNS} FROM warnings
                WHERE guild_id = ? AND user_id = ?
                ORDER BY warned_at ASC, id ASC""",
            (guild_id, user_id),
        )
        return [WarningEntry.from_row(row) for row in rows]

    async def remove_warning_by_number(
        self: "DatabaseManager",
        guild_id: int,
        user_id: int,
        number: int,
    ) -> bool:
        """
        Delete the n-th warning (1-indexed, oldest first).

        Returns:
            True if a warning was deleted.
        """
        if number < 1 or number > MAX_STORED_INT:
            return False

        async with self.backend.transaction() as tx:
            deleted = await tx.fetchone(
                """DELETE FROM warnings
                   WHERE id = (
                       SELECT id FROM (
                           SELECT id, ROW_NUMBER() OVER (ORDER BY warned_at ASC, id ASC) AS rn
                           FROM warnings
                           WHERE guild_id = ? AND user_id = ?
                       ) ranked
                       WHERE rn = ?
                   )
                   RETURNING id""",
                (guild_id, user_id, number),
            )

        if deleted is None:
            return False

        logger.tree("Warning Removed", [
            ("Guild ID", str(guild_id)),
            ("User ID", str(user_id)),
            ("Warning #", str(number)),
        ], emoji="🗑️")
        return True

    async def clear_warnings(self: "DatabaseManager", guild_id: int, user_id: int) -> int:
        """
        Delete every warning for a user.

        Returns:
            Number of warnings deleted.
        """
        async with self.backend.transaction() as tx:
            rows = await tx.fetchall(
                "DELETE FROM warnings WHERE guild_id = ? AND user_id = ? RETURNING id",
                (guild_id, user_id),
            )

        if rows:
            logger.tree("Warnings Cleared", [
                ("Guild ID", str(guild_id)),
                ("User ID", str(user_id)),
                ("Removed", str(len(rows))),
            ], emoji="🧹")
        return len(rows)

    async def count_warnings_in_window(
        self: "DatabaseManager",
        guild_id: int,
        user_id: int,
        window_seconds: int,
    ) -> int:
        """Count warnings with warned_at >= now - window_seconds."""
        since = self.now() - max(int(window_seconds), 0)
        count = await self.backend.fetchval(
            """SELECT COUNT(*) FROM warnings
               WHERE guild_id = ? AND user_id = ? AND warned_at >= ?""",
            (guild_id, user_id, since),
        )
        return int(count or 0)
