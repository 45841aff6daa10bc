"""
Database Schema Module
======================

Table definitions and the case-label migration.

DESIGN:
    DDL is written once for both backends; only the auto-increment primary
    key differs and comes from ``backend.serial_pk``. Every statement is
    idempotent so initialize() is safe on every start.
"""

from typing import TYPE_CHECKING

from autumn.core.database.cases import KNOWN_ACTIONS, WORD_FILTER_PREFIX, action_code
from autumn.core.logger import logger

if TYPE_CHECKING:
    from autumn.core.database.manager import DatabaseManager


def _action_code_sql() -> str:
    """SQL CASE expression mirroring action_code() for the backfill."""
    branches = [f"WHEN action = '{action}' THEN '{action_code(action)}'" for action in KNOWN_ACTIONS]
    branches.append(
        f"WHEN substr(action, 1, {len(WORD_FILTER_PREFIX)}) = '{WORD_FILTER_PREFIX}' "
        f"THEN '{action_code(WORD_FILTER_PREFIX + 'log')}'"
    )
    return "CASE " + " ".join(branches) + " ELSE 'M' END"


class SchemaMixin:
    """Mixin for database schema initialization."""

    async def _init_tables(self: "DatabaseManager") -> None:
        """Create every table and index if missing."""
        pk = self.backend.serial_pk

        # -----------------------------------------------------------------
        # Moderation Cases
        # case_code / action_case_number are added by ensure_case_schema_compat
        # so fresh and legacy databases take the same path.
        # -----------------------------------------------------------------
        await self.backend.execute(f"""
            CREATE TABLE IF NOT EXISTS mod_cases (
                id {pk},
                guild_id BIGINT NOT NULL,
                case_number BIGINT NOT NULL,
                target_user_id BIGINT,
                moderator_user_id BIGINT NOT NULL,
                action TEXT NOT NULL,
                reason TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'active',
                duration_seconds BIGINT,
                created_at BIGINT NOT NULL,
                updated_at BIGINT NOT NULL
            )
        """)
        await self.backend.execute(
            "CREATE INDEX IF NOT EXISTS mod_cases_guild_case_number_idx "
            "ON mod_cases (guild_id, case_number)"
        )
        await self.backend.execute(
            "CREATE INDEX IF NOT EXISTS mod_cases_guild_target_action_idx "
            "ON mod_cases (guild_id, target_user_id, action, created_at)"
        )

        # -----------------------------------------------------------------
        # Case Events (append-only audit trail)
        # -----------------------------------------------------------------
        await self.backend.execute(f"""
            CREATE TABLE IF NOT EXISTS mod_case_events (
                id {pk},
                case_id BIGINT NOT NULL REFERENCES mod_cases (id),
                guild_id BIGINT NOT NULL,
                event_type TEXT NOT NULL,
                actor_user_id BIGINT NOT NULL,
                old_reason TEXT,
                new_reason TEXT,
                note TEXT,
                created_at BIGINT NOT NULL
            )
        """)
        await self.backend.execute(
            "CREATE INDEX IF NOT EXISTS mod_case_events_case_idx "
            "ON mod_case_events (case_id, created_at, id)"
        )

        # -----------------------------------------------------------------
        # Warnings
        # -----------------------------------------------------------------
        await self.backend.execute(f"""
            CREATE TABLE IF NOT EXISTS warnings (
                id {pk},
                guild_id BIGINT NOT NULL DEFAULT 0,
                user_id BIGINT NOT NULL,
                moderator_id BIGINT NOT NULL,
                reason TEXT NOT NULL,
                warned_at BIGINT NOT NULL
            )
        """)
        await self.backend.execute(
            "CREATE INDEX IF NOT EXISTS warnings_guild_user_warned_at_idx "
            "ON warnings (guild_id, user_id, warned_at DESC)"
        )

        # -----------------------------------------------------------------
        # Escalation Config
        # -----------------------------------------------------------------
        await self.backend.execute("""
            CREATE TABLE IF NOT EXISTS escalation_config (
                guild_id BIGINT PRIMARY KEY,
                enabled BOOLEAN NOT NULL DEFAULT FALSE,
                warn_threshold INT NOT NULL DEFAULT 3,
                warn_window_seconds BIGINT NOT NULL DEFAULT 86400,
                timeout_window_seconds BIGINT NOT NULL DEFAULT 604800
            )
        """)

        # -----------------------------------------------------------------
        # Word Filter
        # -----------------------------------------------------------------
        await self.backend.execute("""
            CREATE TABLE IF NOT EXISTS word_filter_config (
                guild_id BIGINT PRIMARY KEY,
                enabled BOOLEAN NOT NULL DEFAULT FALSE,
                action TEXT NOT NULL DEFAULT 'delete_and_log'
            )
        """)
        await self.backend.execute(f"""
            CREATE TABLE IF NOT EXISTS word_filter_words (
                id {pk},
                guild_id BIGINT NOT NULL,
                word TEXT NOT NULL,
                is_preset BOOLEAN NOT NULL DEFAULT FALSE,
                created_at BIGINT NOT NULL,
                UNIQUE (guild_id, word)
            )
        """)

    async def ensure_case_schema_compat(self: "DatabaseManager") -> int:
        """
        Bring mod_cases up to the labelled-case schema.

        Adds case_code / action_case_number if missing, back-fills rows that
        still carry the defaults (number 0 or code 'M') by numbering each
        (guild, code) partition in (created_at, id) order, then creates the
        unique label index and the guild_mod_config table.

        Re-running produces the same assignment: every previously assigned
        row either no longer matches the guard or is renumbered to the same
        position.

        Returns:
            Number of rows touched by the backfill.
        """
        await self.backend.add_column_if_missing(
            "mod_cases", "case_code", "TEXT NOT NULL DEFAULT 'M'"
        )
        await self.backend.add_column_if_missing(
            "mod_cases", "action_case_number", "BIGINT NOT NULL DEFAULT 0"
        )

        code_sql = _action_code_sql()
        # Statement must start with UPDATE so sqlite3 reports a rowcount.
        updated = await self.backend.execute(f"""
            UPDATE mod_cases
            SET
                case_code = ranked.resolved_code,
                action_case_number = ranked.resolved_number
            FROM (
                SELECT
                    id,
                    {code_sql} AS resolved_code,
                    ROW_NUMBER() OVER (
                        PARTITION BY guild_id, {code_sql}
                        ORDER BY created_at ASC, id ASC
                    ) AS resolved_number
                FROM mod_cases
            ) AS ranked
            WHERE mod_cases.id = ranked.id
              AND (mod_cases.action_case_number = 0 OR mod_cases.case_code = 'M')
        """)

        # Created after the backfill so legacy rows sharing (guild, 'M', 0)
        # cannot block it.
        await self.backend.execute(
            "CREATE UNIQUE INDEX IF NOT EXISTS mod_cases_guild_case_code_number_idx "
            "ON mod_cases (guild_id, case_code, action_case_number)"
        )

        await self.backend.execute("""
            CREATE TABLE IF NOT EXISTS guild_mod_config (
                guild_id BIGINT PRIMARY KEY,
                modlog_channel_id BIGINT
            )
        """)

        if updated:
            logger.tree("Case Labels Backfilled", [
                ("Rows", str(updated)),
            ], emoji="🔢")

        return updated
