"""
Autumn Moderation Bot - Services Package
========================================

Moderation logic that sits between the database and the cogs.

DESIGN:
    Services are plain classes built once in AutumnBot.setup_hook and
    shared by cogs through the bot instance. They:
    - Take their collaborators (db, sink) as constructor arguments
    - Handle their own Discord and storage failures
    - Never raise into command or event handlers

Available Services:
    DiscordModerationSink: Timeouts, DMs and modlog posts
    EscalationService: Warning threshold checks and auto-timeouts
    WordFilterService: Message scanning and configured filter actions
"""

from .escalation import EscalationService, escalation_timeout_seconds
from .moderation_sink import DiscordModerationSink
from .word_filter import WordFilterService


__all__ = [
    "DiscordModerationSink",
    "EscalationService",
    "WordFilterService",
    "escalation_timeout_seconds",
]
