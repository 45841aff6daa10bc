"""
Autumn Moderation Bot - Database Models
=======================================

Dataclasses for moderation records returned by the database mixins.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from autumn.utils.formatting import format_case_label


# =============================================================================
# Constants
# =============================================================================

CASE_STATUS_ACTIVE = "active"
CASE_STATUS_COMPLETED = "completed"

EVENT_CREATED = "created"
EVENT_REASON_UPDATED = "reason_updated"
EVENT_NOTE_ADDED = "note_added"

TIMEOUT_ACTIONS = ("timeout", "auto_timeout", "word_filter_timeout")
"""Actions that count as a prior timeout when computing the escalation tier."""

WORD_FILTER_ACTIONS = ("log_only", "delete_and_log", "warn_and_log", "timeout_delete_and_log")

DEFAULT_WARN_THRESHOLD = 3
DEFAULT_WARN_WINDOW_SECONDS = 86400
DEFAULT_TIMEOUT_WINDOW_SECONDS = 604800
DEFAULT_WORD_FILTER_ACTION = "delete_and_log"


# =============================================================================
# Cases
# =============================================================================

@dataclass
class NewCase:
    """Input for create_case."""
    guild_id: int
    moderator_user_id: int
    action: str
    reason: str
    target_user_id: Optional[int] = None
    status: str = CASE_STATUS_ACTIVE
    duration_seconds: Optional[int] = None


@dataclass
class CaseFilters:
    """Filters for list_recent_cases. ``limit`` is clamped to 1..200."""
    target_user_id: Optional[int] = None
    moderator_user_id: Optional[int] = None
    action: Optional[str] = None
    limit: int = 20


@dataclass
class CaseSummary:
    """A case as shown in lists and logs; enough to render its label."""
    case_number: int
    case_code: str
    action_case_number: int
    target_user_id: Optional[int]
    moderator_user_id: int
    action: str
    reason: str
    duration_seconds: Optional[int]
    created_at: int

    @property
    def label(self) -> str:
        return format_case_label(self.case_code, self.action_case_number)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CaseSummary":
        return cls(
            case_number=int(row["case_number"]),
            case_code=row["case_code"],
            action_case_number=int(row["action_case_number"]),
            target_user_id=row.get("target_user_id"),
            moderator_user_id=int(row["moderator_user_id"]),
            action=row["action"],
            reason=row["reason"],
            duration_seconds=row.get("duration_seconds"),
            created_at=int(row["created_at"]),
        )


@dataclass
class ModerationCase:
    """A full case row."""
    id: int
    guild_id: int
    case_number: int
    case_code: str
    action_case_number: int
    target_user_id: Optional[int]
    moderator_user_id: int
    action: str
    reason: str
    status: str
    duration_seconds: Optional[int]
    created_at: int
    updated_at: int

    @property
    def label(self) -> str:
        return format_case_label(self.case_code, self.action_case_number)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ModerationCase":
        return cls(
            id=int(row["id"]),
            guild_id=int(row["guild_id"]),
            case_number=int(row["case_number"]),
            case_code=row["case_code"],
            action_case_number=int(row["action_case_number"]),
            target_user_id=row.get("target_user_id"),
            moderator_user_id=int(row["moderator_user_id"]),
            action=row["action"],
            reason=row["reason"],
            status=row["status"],
            duration_seconds=row.get("duration_seconds"),
            created_at=int(row["created_at"]),
            updated_at=int(row["updated_at"]),
        )


@dataclass
class CaseEvent:
    """One append-only audit entry on a case."""
    id: int
    case_id: int
    guild_id: int
    event_type: str
    actor_user_id: int
    old_reason: Optional[str]
    new_reason: Optional[str]
    note: Optional[str]
    created_at: int

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CaseEvent":
        return cls(
            id=int(row["id"]),
            case_id=int(row["case_id"]),
            guild_id=int(row["guild_id"]),
            event_type=row["event_type"],
            actor_user_id=int(row["actor_user_id"]),
            old_reason=row.get("old_reason"),
            new_reason=row.get("new_reason"),
            note=row.get("note"),
            created_at=int(row["created_at"]),
        )


# =============================================================================
# Warnings
# =============================================================================

@dataclass
class WarningEntry:
    id: int
    guild_id: int
    user_id: int
    moderator_id: int
    reason: str
    warned_at: int

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "WarningEntry":
        return cls(
            id=int(row["id"]),
            guild_id=int(row["guild_id"]),
            user_id=int(row["user_id"]),
            moderator_id=int(row["moderator_id"]),
            reason=row["reason"],
            warned_at=int(row["warned_at"]),
        )


@dataclass
class WarningRecord:
    """Result of record_warning. ``warn_number`` is the user's total count."""
    warn_number: int


# =============================================================================
# Guild Configuration
# =============================================================================

@dataclass
class EscalationConfig:
    guild_id: int
    enabled: bool = False
    warn_threshold: int = DEFAULT_WARN_THRESHOLD
    warn_window_seconds: int = DEFAULT_WARN_WINDOW_SECONDS
    timeout_window_seconds: int = DEFAULT_TIMEOUT_WINDOW_SECONDS

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "EscalationConfig":
        return cls(
            guild_id=int(row["guild_id"]),
            enabled=bool(row["enabled"]),
            warn_threshold=int(row["warn_threshold"]),
            warn_window_seconds=int(row["warn_window_seconds"]),
            timeout_window_seconds=int(row["timeout_window_seconds"]),
        )


@dataclass
class WordFilterConfig:
    guild_id: int
    enabled: bool = False
    action: str = DEFAULT_WORD_FILTER_ACTION

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "WordFilterConfig":
        return cls(
            guild_id=int(row["guild_id"]),
            enabled=bool(row["enabled"]),
            action=row["action"],
        )


# =============================================================================
# Escalation
# =============================================================================

@dataclass
class EscalationResult:
    """Outcome of an escalation that fired."""
    timed_out: bool
    timeout_seconds: int
    tier: int
    case: Optional[CaseSummary] = field(default=None, compare=False)


__all__ = [
    "CASE_STATUS_ACTIVE",
    "CASE_STATUS_COMPLETED",
    "EVENT_CREATED",
    "EVENT_REASON_UPDATED",
    "EVENT_NOTE_ADDED",
    "TIMEOUT_ACTIONS",
    "WORD_FILTER_ACTIONS",
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
