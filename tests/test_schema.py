"""
Autumn Moderation Bot - Schema Migration Tests
==============================================

Tests for upgrading a pre-label mod_cases table.
"""

import pytest

from autumn.core.database import DatabaseManager, NewCase, SQLiteBackend

from conftest import GUILD_ID, MODERATOR_ID, TARGET_ID


LEGACY_DDL = """
    CREATE TABLE mod_cases (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
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
"""

LEGACY_ROWS = [
    # (guild_id, case_number, action, created_at)
    (GUILD_ID, 1, "warn", 100),
    (GUILD_ID, 2, "ban", 200),
    (GUILD_ID, 3, "warn", 300),
    (GUILD_ID, 4, "word_filter_warn", 400),
    (GUILD_ID, 5, "slowmode", 500),
    (GUILD_ID + 1, 1, "warn", 150),
]


async def _legacy_db(path):
    """Database whose mod_cases table predates case labels."""
    backend = SQLiteBackend(path)
    await backend.connect()
    await backend.execute(LEGACY_DDL)
    for guild_id, number, action, created_at in LEGACY_ROWS:
        await backend.execute(
            """INSERT INTO mod_cases
               (guild_id, case_number, target_user_id, moderator_user_id, action, reason, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (guild_id, number, TARGET_ID, MODERATOR_ID, action, "legacy", created_at, created_at),
        )
    return DatabaseManager(backend)


async def _labels(db):
    rows = await db.backend.fetchall(
        "SELECT guild_id, case_number, case_code, action_case_number FROM mod_cases ORDER BY id"
    )
    return [(r["guild_id"], r["case_number"], f"{r['case_code']}{r['action_case_number']}") for r in rows]


class TestCaseLabelBackfill:
    """Tests for ensure_case_schema_compat on legacy data."""

    @pytest.mark.asyncio
    async def test_backfill_assigns_labels(self, temp_db_path):
        """Legacy rows get codes from their action and numbers in creation order."""
        db = await _legacy_db(temp_db_path)
        try:
            await db.initialize()
            labels = await _labels(db)
        finally:
            await db.close()

        assert labels == [
            (GUILD_ID, 1, "W1"),
            (GUILD_ID, 2, "B1"),
            (GUILD_ID, 3, "W2"),
            (GUILD_ID, 4, "WF1"),
            (GUILD_ID, 5, "M1"),
            (GUILD_ID + 1, 1, "W1"),
        ]

    @pytest.mark.asyncio
    async def test_backfill_is_idempotent(self, temp_db_path):
        """Running the migration again leaves every label where it was."""
        db = await _legacy_db(temp_db_path)
        try:
            await db.initialize()
            first = await _labels(db)
            await db.ensure_case_schema_compat()
            second = await _labels(db)
        finally:
            await db.close()

        assert first == second

    @pytest.mark.asyncio
    async def test_new_cases_continue_after_backfill(self, temp_db_path):
        """New cases continue both sequences from the migrated rows."""
        db = await _legacy_db(temp_db_path)
        try:
            await db.initialize()
            case = await db.create_case(NewCase(
                guild_id=GUILD_ID,
                target_user_id=TARGET_ID,
                moderator_user_id=MODERATOR_ID,
                action="warn",
                reason="new",
            ))
        finally:
            await db.close()

        assert case.case_number == 6
        assert case.label == "W3"

    @pytest.mark.asyncio
    async def test_fresh_database_initializes_twice(self, temp_db_path):
        """initialize() on an already migrated file is a no-op."""
        db = DatabaseManager(SQLiteBackend(temp_db_path))
        await db.initialize()
        await db.close()

        db = DatabaseManager(SQLiteBackend(temp_db_path))
        try:
            await db.initialize()
            assert await db.ensure_case_schema_compat() == 0
        finally:
            await db.close()
