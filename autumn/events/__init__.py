"""
Autumn Moderation Bot - Events Package
======================================

Event handler Cogs.

DESIGN:
    Each event file contains a Cog class with @commands.Cog.listener
    decorators and an ``async def setup(bot)``. Cogs are loaded
    dynamically by the bot using load_extension().

    Event routing:
    - messages.py: Message create -> word filter
"""

# =============================================================================
# Event Cog Registry
# =============================================================================

EVENT_COGS = [
    "autumn.events.messages",
]


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "EVENT_COGS",
]
