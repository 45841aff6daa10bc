"""
Autumn Moderation Bot - Case Ledger
===================================

Moderation case creation, numbering, reason edits, notes and events.

DESIGN:
    Every case carries two numbers:
    - case_number: position in the guild's whole history (all actions)
    - action_case_number: position within its case_code, used for the
      short label users type (W12, AT3)

    Both are MAX()+1 reads inside the creating transaction, after taking
    the guild's transaction-scoped advisory lock. The lock, not retries,
    is what keeps each sequence gap-free and duplicate-free under
    concurrent commands. Case rows are never deleted.
"""

from typing import List, Optional, TYPE_CHECKING

from autumn.core.constants import MAX_STORED_INT
from autumn.core.database.models import (
    CASE_STATUS_ACTIVE,
    EVENT_CREATED,
    EVENT_NOTE_ADDED,
    EVENT_REASON_UPDATED,
    TIMEOUT_ACTIONS,
    CaseEvent,
    CaseFilters,
    CaseSummary,
    ModerationCase,
    NewCase,
)
from autumn.core.logger import logger
from autumn.utils.formatting import format_case_label, truncate

if TYPE_CHECKING:
    from autumn.core.database.manager import DatabaseManager


# =============================================================================
# Action Codes
# =============================================================================

WORD_FILTER_PREFIX = "word_filter_"

KNOWN_ACTIONS = (
    "warn",
    "ban",
    "kick",
    "timeout",
    "unban",
    "untimeout",
    "unwarn",
    "unwarn_all",
    "purge",
    "terminate",
    "auto_timeout",
)
"""Actions with a dedicated code. word_filter_* and unknown actions are handled separately."""

MAX_LIST_LIMIT = 200

CASE_COLUMNS = (
    "id, guild_id, case_number, case_code, action_case_number, target_user_id, "
    "moderator_user_id, action, reason, status, duration_seconds, created_at, updated_at"
)

SUMMARY_COLUMNS = (
    "case_number, case_code, action_case_number, target_user_id, moderator_user_id, "
    "action, reason, duration_seconds, created_at"
)


def action_code(action: str) -> str:
    """
    Map an action key to its case code.

    Unknown actions fall back to "M" (misc).
    """
    match action:
        case "warn":
            return "W"
        case "ban":
            return "B"
        case "kick":
            return "K"
        case "timeout":
            return "T"
        case "unban":
            return "UB"
        case "untimeout":
            return "UT"
        case "unwarn":
            return "UW"
        case "unwarn_all":
            return "UWA"
        case "purge":
            return "P"
        case "terminate":
            return "TR"
        case "auto_timeout":
            return "AT"
        case str() if action.startswith(WORD_FILTER_PREFIX):
            return "WF"
        case _:
            return "M"


def clamp_limit(limit: int) -> int:
    return max(1, min(int(limit), MAX_LIST_LIMIT))


def is_case_number(number: int) -> bool:
    """True if ``number`` could be a stored action_case_number."""
    return 0 < number <= MAX_STORED_INT


# =============================================================================
# Cases Mixin
# =============================================================================

class CasesMixin:
    """Mixin for the moderation case ledger."""

    # =========================================================================
    # Creation
    # =========================================================================

    async def create_case(self: "DatabaseManager", new_case: NewCase) -> CaseSummary:
        """
        Create a case and its "created" event in one transaction.

        Args:
            new_case: Case payload. ``action`` decides the case code.

        Returns:
            Summary of the stored case, including both numbers.

        Raises:
            StorageError: On any store failure; nothing is written.
        """
        code = action_code(new_case.action)

        async with self.backend.transaction() as tx:
            await tx.advisory_lock(new_case.guild_id)

            latest = await tx.fetchone(
                """SELECT COALESCE(MAX(case_number), 0) + 1 AS next_case_number,
                          COALESCE(MAX(created_at), 0) AS latest_created_at
                   FROM mod_cases
                   WHERE guild_id = ?""",
                (new_case.guild_id,),
            )
            next_case_number = latest["next_case_number"]
            # created_at never runs behind an earlier case of the guild.
            now = max(self.now(), int(latest["latest_created_at"]))

            next_action_number = await tx.fetchval(
                """SELECT COALESCE(MAX(action_case_number), 0) + 1
                   FROM mod_cases
                   WHERE guild_id = ? AND case_code = ?""",
                (new_case.guild_id, code),
            )

            row = await tx.fetchone(
                f"""INSERT INTO mod_cases (
                        guild_id, case_number, case_code, action_case_number,
                        target_user_id, moderator_user_id, action, reason,
                        status, duration_seconds, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    RETURNING {CASE_COLUMNS}""",
                (
                    new_case.guild_id,
                    int(next_case_number),
                    code,
                    int(next_action_number),
                    new_case.target_user_id,
                    new_case.moderator_user_id,
                    new_case.action,
                    new_case.reason,
                    new_case.status or CASE_STATUS_ACTIVE,
                    new_case.duration_seconds,
                    now,
                    now,
                ),
            )

            await tx.execute(
                """INSERT INTO mod_case_events
                   (case_id, guild_id, event_type, actor_user_id, note, created_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (row["id"], new_case.guild_id, EVENT_CREATED, new_case.moderator_user_id, "Case created", now),
            )

        summary = CaseSummary.from_row(row)

        logger.tree("Case Created", [
            ("Label", summary.label),
            ("Case #", str(summary.case_number)),
            ("Guild ID", str(new_case.guild_id)),
            ("Action", new_case.action),
            ("Target ID", str(new_case.target_user_id) if new_case.target_user_id else "None"),
            ("Moderator ID", str(new_case.moderator_user_id)),
            ("Reason", truncate(new_case.reason, 50)),
        ], emoji="📋")

        return summary

    # =========================================================================
    # Queries
    # =========================================================================

    async def list_recent_cases(
        self: "DatabaseManager",
        guild_id: int,
        filters: Optional[CaseFilters] = None,
    ) -> List[CaseSummary]:
        """
        List a guild's cases, newest first.

        Args:
            guild_id: Guild to list.
            filters: Optional target / moderator / action filters and limit.
                Action matching is case-insensitive; limit is clamped to 1..200.
        """
        filters = filters or CaseFilters()
        clauses = ["guild_id = ?"]
        params: list = [guild_id]

        if filters.target_user_id is not None:
            clauses.append("target_user_id = ?")
            params.append(filters.target_user_id)
        if filters.moderator_user_id is not None:
            clauses.append("moderator_user_id = ?")
            params.append(filters.moderator_user_id)
        if filters.action:
            clauses.append("LOWER(action) = ?")
            params.append(filters.action.strip().lower())

        params.append(clamp_limit(filters.limit))

        rows = await self.backend.fetchall(
            f"""SELECT {SUMMARY_COLUMNS}
                FROM mod_cases
                WHERE {" AND ".join(clauses)}
                ORDER BY case_number DESC
                LIMIT ?""",
            params,
        )
        return [CaseSummary.from_row(row) for row in rows]

    async def get_case_by_label(
        self: "DatabaseManager",
        guild_id: int,
        case_code: str,
        action_case_number: int,
    ) -> Optional[ModerationCase]:
        """Look up a case by its label parts; None if it does not exist."""
        if not is_case_number(action_case_number):
            return None

        row = await self.backend.fetchone(
            f"""SELECT {CASE_COLUMNS}
                FROM mod_cases
                WHERE guild_id = ? AND case_code = ? AND action_case_number = ?""",
            (guild_id, case_code.upper(), action_case_number),
        )
        return ModerationCase.from_row(row) if row else None

    async def get_case_events(
        self: "DatabaseManager",
        guild_id: int,
        case_code: str,
        action_case_number: int,
    ) -> List[CaseEvent]:
        """Events of a case, oldest first. Empty if the case does not exist."""
        if not is_case_number(action_case_number):
            return []

        rows = await self.backend.fetchall(
            """SELECT e.id, e.case_id, e.guild_id, e.event_type, e.actor_user_id,
                      e.old_reason, e.new_reason, e.note, e.created_at
               FROM mod_case_events e
               JOIN mod_cases c ON c.id = e.case_id
               WHERE c.guild_id = ? AND c.case_code = ? AND c.action_case_number = ?
                 AND e.guild_id = c.guild_id
               ORDER BY e.created_at ASC, e.id ASC""",
            (guild_id, case_code.upper(), action_case_number),
        )
        return [CaseEvent.from_row(row) for row in rows]

    async def count_timeouts_in_window(
        self: "DatabaseManager",
        guild_id: int,
        user_id: int,
        window_seconds: int,
    ) -> int:
        """
        Count timeout-type cases against a user created within the window.

        Timeout-type means timeout, auto_timeout or word_filter_timeout.
        """
        since = self.now() - max(int(window_seconds), 0)
        placeholders = ", ".join("?" for _ in TIMEOUT_ACTIONS)
        count = await self.backend.fetchval(
            f"""SELECT COUNT(*) FROM mod_cases
                WHERE guild_id = ? AND target_user_id = ?
                  AND action IN ({placeholders})
                  AND created_at >= ?""",
            (guild_id, user_id, *TIMEOUT_ACTIONS, since),
        )
        return int(count or 0)

    # =========================================================================
    # Edits
    # =========================================================================

    async def update_case_reason(
        self: "DatabaseManager",
        guild_id: int,
        case_code: str,
        action_case_number: int,
        actor_user_id: int,
        new_reason: str,
    ) -> Optional[ModerationCase]:
        """
        Replace a case's reason and record a reason_updated event.

        Returns:
            The updated case, or None if no such case exists.
        """
        if not is_case_number(action_case_number):
            return None

        now = self.now()
        code = case_code.upper()

        async with self.backend.transaction() as tx:
            existing = await tx.fetchone(
                f"""SELECT id, reason FROM mod_cases
                    WHERE guild_id = ? AND case_code = ? AND action_case_number = ?{tx.for_update}""",
                (guild_id, code, action_case_number),
            )
            if existing is None:
                return None

            updated = await tx.fetchone(
                f"""UPDATE mod_cases SET reason = ?, updated_at = ?
                    WHERE id = ?
                    RETURNING {CASE_COLUMNS}""",
                (new_reason, now, existing["id"]),
            )

            await tx.execute(
                """INSERT INTO mod_case_events
                   (case_id, guild_id, event_type, actor_user_id, old_reason, new_reason, note, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    existing["id"], guild_id, EVENT_REASON_UPDATED, actor_user_id,
                    existing["reason"], new_reason, "Reason edited", now,
                ),
            )

        case = ModerationCase.from_row(updated)

        logger.tree("Case Reason Updated", [
            ("Label", case.label),
            ("Guild ID", str(guild_id)),
            ("Actor ID", str(actor_user_id)),
            ("Old", truncate(existing["reason"], 40)),
            ("New", truncate(new_reason, 40)),
        ], emoji="✏️")

        return case

    async def add_case_note(
        self: "DatabaseManager",
        guild_id: int,
        case_code: str,
        action_case_number: int,
        actor_user_id: int,
        note: str,
    ) -> bool:
        """
        Attach a note to a case.

        Returns:
            True if the note was added, False if the case does not exist.
        """
        if not is_case_number(action_case_number):
            return False

        now = self.now()
        code = case_code.upper()

        async with self.backend.transaction() as tx:
            case_id = await tx.fetchval(
                f"""SELECT id FROM mod_cases
                    WHERE guild_id = ? AND case_code = ? AND action_case_number = ?{tx.for_update}""",
                (guild_id, code, action_case_number),
            )
            if case_id is None:
                return False

            await tx.execute(
                """INSERT INTO mod_case_events
                   (case_id, guild_id, event_type, actor_user_id, note, created_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (case_id, guild_id, EVENT_NOTE_ADDED, actor_user_id, note, now),
            )
            await tx.execute(
                "UPDATE mod_cases SET updated_at = ? WHERE id = ?",
                (now, case_id),
            )

        logger.tree("Case Note Added", [
            ("Label", format_case_label(code, action_case_number)),
            ("Guild ID", str(guild_id)),
            ("Actor ID", str(actor_user_id)),
            ("Note", truncate(note, 50)),
        ], emoji="📝")

        return True
