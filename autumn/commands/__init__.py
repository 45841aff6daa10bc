"""
Autumn Moderation Bot - Commands Package
========================================

Slash command cogs.

DESIGN:
    Each command package holds a Cog in cog.py and an
    ``async def setup(bot)`` in its __init__.py. Cogs are loaded
    dynamically by the bot using load_extension().

    To add a new command:
    1. Create a package in this directory with cog.py and __init__.py
    2. Add app_commands to the Cog, gated with default_permissions
       and a matching checks.has_permissions
    3. Add the package to COMMAND_COGS below

Available Commands:
    /warn, /warnings, /unwarn: Warning management (moderate members)
    /case view|reason|note|history, /modlogs: Case ledger (moderate members)
    /escalation, /modlogchannel, /wordfilter: Guild settings (manage server)
"""

# =============================================================================
# Command Cog Registry
# =============================================================================

COMMAND_COGS = [
    "autumn.commands.warn",
    "autumn.commands.cases",
    "autumn.commands.settings",
]
"""
List of command cog module paths for dynamic loading.

DESIGN:
    Bot iterates this list and calls load_extension() for each.
    Add new command cogs here to have them loaded automatically.
"""


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "COMMAND_COGS",
]
