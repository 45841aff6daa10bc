"""
Autumn Moderation Bot
=====================

Discord moderation bot with an auditable case ledger, warning
escalation and a per-guild word filter.
"""

__version__ = "1.0.0"
