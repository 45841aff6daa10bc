"""
Autumn Moderation Bot - Database Module
=======================================

Moderation case ledger, warning store and guild configuration.
"""

from autumn.core.database.base import (
    DatabaseBackend,
    PostgresBackend,
    SQLiteBackend,
    StorageError,
    backend_from_url,
)
from autumn.core.database.cases import action_code
from autumn.core.database.manager import DatabaseManager, get_db
from autumn.core.database.models import (
    CaseEvent,
    CaseFilters,
    CaseSummary,
    EscalationConfig,
    EscalationResult,
    ModerationCase,
    NewCase,
    WarningEntry,
    WarningRecord,
    WordFilterConfig,
)
from autumn.core.database.word_filter import PRESET_WORDS

__all__ = [
    # Main interface
    "DatabaseManager",
    "get_db",
    "action_code",
    "PRESET_WORDS",

    # Backends
    "DatabaseBackend",
    "SQLiteBackend",
    "PostgresBackend",
    "StorageError",
    "backend_from_url",

    # Records
    "NewCase",
    "CaseFilters",
    "CaseSummary",
    "ModerationCase",
    "CaseEvent",
    "WarningEntry",
    "WarningRecord",
    "EscalationConfig",
    "WordFilterConfig",
    "EscalationResult",
]
