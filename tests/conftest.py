"""
Autumn Moderation Bot - Test Fixtures
=====================================

Shared fixtures for all tests.

Tests run against a real SQLite database in a temp directory; Discord
objects are MagicMock/AsyncMock stand-ins built per test.
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

# Keep test runs from writing into the project's logs/ folder.
os.environ.setdefault("LOGS_DIR", str(Path(tempfile.gettempdir()) / "autumn-test-logs"))

from autumn.core.database import DatabaseManager, SQLiteBackend  # noqa: E402
from autumn.utils.cache import CacheService, MemoryCacheStore  # noqa: E402


GUILD_ID = 1000
MODERATOR_ID = 111
TARGET_ID = 222
BOT_USER_ID = 999
FIXED_NOW = 1_700_000_000


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path for testing."""
    return tmp_path / "test_autumn.db"


@pytest_asyncio.fixture
async def test_db(temp_db_path):
    """Fresh, initialized database with an in-memory config cache."""
    db = DatabaseManager(
        SQLiteBackend(temp_db_path),
        cache=CacheService(MemoryCacheStore(), prefix="test"),
    )
    await db.initialize()
    yield db
    await db.close()


# =============================================================================
# Discord Objects
# =============================================================================

@pytest.fixture
def mock_discord_user():
    """Create a mock Discord user."""
    user = MagicMock()
    user.id = TARGET_ID
    user.name = "testuser"
    user.display_name = "Test User"
    user.mention = f"<@{TARGET_ID}>"
    user.display_avatar.url = "https://cdn.discordapp.com/avatars/222/avatar.png"
    user.bot = False
    user.send = AsyncMock()
    return user


@pytest.fixture
def mock_moderator():
    """Create a mock moderator user."""
    mod = MagicMock()
    mod.id = MODERATOR_ID
    mod.name = "moduser"
    mod.display_name = "Mod User"
    mod.bot = False
    return mod


@pytest.fixture
def mock_discord_guild():
    """Create a mock Discord guild."""
    guild = MagicMock()
    guild.id = GUILD_ID
    guild.name = "Test Server"
    guild.get_member = MagicMock(return_value=None)
    guild.fetch_member = AsyncMock()
    return guild


@pytest.fixture
def mock_interaction(mock_moderator):
    """Create a mock slash command interaction invoked by the moderator."""
    interaction = MagicMock()
    interaction.guild_id = GUILD_ID
    interaction.user = mock_moderator
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction


@pytest.fixture
def mock_sink():
    """Moderation sink whose side effects all succeed."""
    sink = MagicMock()
    sink.apply_timeout = AsyncMock(return_value=True)
    sink.send_dm = AsyncMock(return_value=True)
    sink.publish_case = AsyncMock(return_value=True)
    return sink


@pytest.fixture
def mock_bot(test_db, mock_sink):
    """Bot stand-in exposing the attributes cogs read."""
    bot = MagicMock()
    bot.db = test_db
    bot.sink = mock_sink
    bot.escalation = MagicMock()
    bot.escalation.check_and_escalate = AsyncMock(return_value=None)
    bot.user.id = BOT_USER_ID
    return bot


def sent_content(interaction):
    """Content of the most recent reply sent on a mock interaction."""
    call = interaction.response.send_message.call_args
    return call.kwargs.get("content")


def sent_embed(interaction):
    """Embed of the most recent reply sent on a mock interaction."""
    call = interaction.response.send_message.call_args
    return call.kwargs.get("embed")
