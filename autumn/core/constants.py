"""
Autumn Moderation Bot - Centralized Constants
=============================================

Magic numbers shared by commands, events and services.
"""

# =============================================================================
# Discord Limits
# =============================================================================

EMBED_DESCRIPTION_LIMIT = 4096
EMBED_FIELD_VALUE_LIMIT = 1024
REASON_MAX_LENGTH = 512
NOTE_MAX_LENGTH = 1000
MAX_TIMEOUT_SECONDS = 2419200         # Discord caps timeouts at 28 days
MAX_STORED_INT = 2**63 - 1            # largest value a BIGINT column holds

# =============================================================================
# Moderation
# =============================================================================

WORD_FILTER_TIMEOUT_SECONDS = 300     # timeout_delete_and_log duration
DEFAULT_REASON = "No reason provided"
WARNINGS_PAGE_SIZE = 10
MODLOGS_DEFAULT_LIMIT = 10
CASE_HISTORY_LIMIT = 20

# =============================================================================
# Escalation Settings Bounds
# =============================================================================

MIN_WARN_THRESHOLD = 1
MAX_WARN_THRESHOLD = 100
