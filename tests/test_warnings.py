"""
Autumn Moderation Bot - Warning Store Tests
===========================================

Tests for recording, listing, removing and counting warnings.
"""

import pytest

from conftest import FIXED_NOW, GUILD_ID, MODERATOR_ID, TARGET_ID


class TestRecordWarning:
    """Tests for record_warning."""

    @pytest.mark.asyncio
    async def test_warn_number_is_total_count(self, test_db):
        first = await test_db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "one")
        second = await test_db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "two")

        assert first.warn_number == 1
        assert second.warn_number == 2

    @pytest.mark.asyncio
    async def test_counts_are_per_user_and_guild(self, test_db):
        await test_db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "a")
        other_user = await test_db.record_warning(GUILD_ID, TARGET_ID + 1, MODERATOR_ID, "b")
        other_guild = await test_db.record_warning(GUILD_ID + 1, TARGET_ID, MODERATOR_ID, "c")

        assert other_user.warn_number == 1
        assert other_guild.warn_number == 1

    @pytest.mark.asyncio
    async def test_list_is_oldest_first(self, test_db):
        for i, reason in enumerate(("first", "second", "third")):
            test_db.now = lambda i=i: FIXED_NOW + i
            await test_db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, reason)

        entries = await test_db.list_warnings(GUILD_ID, TARGET_ID)

        assert [e.reason for e in entries] == ["first", "second", "third"]
        assert entries[0].warned_at == FIXED_NOW
        assert entries[0].moderator_id == MODERATOR_ID


class TestRemoveWarning:
    """Tests for remove_warning_by_number and clear_warnings."""

    @pytest.mark.asyncio
    async def test_remove_by_number_renumbers(self, test_db):
        """Removing #2 twice removes the 2nd and then the former 3rd."""
        test_db.now = lambda: FIXED_NOW
        for reason in ("a", "b", "c"):
            await test_db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, reason)

        assert await test_db.remove_warning_by_number(GUILD_ID, TARGET_ID, 2) is True
        assert [e.reason for e in await test_db.list_warnings(GUILD_ID, TARGET_ID)] == ["a", "c"]

        assert await test_db.remove_warning_by_number(GUILD_ID, TARGET_ID, 2) is True
        assert [e.reason for e in await test_db.list_warnings(GUILD_ID, TARGET_ID)] == ["a"]

    @pytest.mark.asyncio
    async def test_remove_out_of_range(self, test_db):
        await test_db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "a")

        assert await test_db.remove_warning_by_number(GUILD_ID, TARGET_ID, 2) is False
        assert await test_db.remove_warning_by_number(GUILD_ID, TARGET_ID, 0) is False
        assert await test_db.remove_warning_by_number(GUILD_ID, TARGET_ID, 10**20) is False
        assert len(await test_db.list_warnings(GUILD_ID, TARGET_ID)) == 1

    @pytest.mark.asyncio
    async def test_remove_only_touches_that_user(self, test_db):
        await test_db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "mine")
        await test_db.record_warning(GUILD_ID, TARGET_ID + 1, MODERATOR_ID, "theirs")

        await test_db.remove_warning_by_number(GUILD_ID, TARGET_ID, 1)

        assert len(await test_db.list_warnings(GUILD_ID, TARGET_ID + 1)) == 1

    @pytest.mark.asyncio
    async def test_clear_warnings(self, test_db):
        for _ in range(3):
            await test_db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "x")

        assert await test_db.clear_warnings(GUILD_ID, TARGET_ID) == 3
        assert await test_db.clear_warnings(GUILD_ID, TARGET_ID) == 0
        assert await test_db.list_warnings(GUILD_ID, TARGET_ID) == []


class TestWarningWindows:
    """Tests for time-windowed warning reads."""

    @pytest.mark.asyncio
    async def test_count_in_window(self, test_db):
        test_db.now = lambda: FIXED_NOW - 7200
        await test_db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "old")
        test_db.now = lambda: FIXED_NOW - 60
        await test_db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "recent")

        test_db.now = lambda: FIXED_NOW
        assert await test_db.count_warnings_in_window(GUILD_ID, TARGET_ID, 3600) == 1
        assert await test_db.count_warnings_in_window(GUILD_ID, TARGET_ID, 86400) == 2
        assert await test_db.count_warnings_in_window(GUILD_ID, TARGET_ID, 0) == 0

    @pytest.mark.asyncio
    async def test_warnings_since(self, test_db):
        test_db.now = lambda: FIXED_NOW - 100
        await test_db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "before")
        test_db.now = lambda: FIXED_NOW
        await test_db.record_warning(GUILD_ID, TARGET_ID, MODERATOR_ID, "at")

        entries = await test_db.warnings_since(GUILD_ID, TARGET_ID, FIXED_NOW)

        assert [e.reason for e in entries] == ["at"]
