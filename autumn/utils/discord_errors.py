"""
Autumn Moderation Bot - Discord Error Logging
=============================================

Classified logging for Discord HTTP failures.

Permission problems (403, usually role hierarchy) and other recoverable
statuses are warnings; everything else is an error and reaches the
error webhook.
"""

from typing import List, Optional, Tuple

import discord

from autumn.core.logger import logger


HTTP_STATUS_DESCRIPTIONS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    429: "Rate Limited",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
}

MISSING_PERMISSIONS_CODE = 50013


def is_missing_permissions(e: discord.HTTPException) -> bool:
    """True for 403s and the 'Missing Permissions' API error code."""
    return isinstance(e, discord.Forbidden) or e.status == 403 or e.code == MISSING_PERMISSIONS_CODE


def log_http_error(
    e: discord.HTTPException,
    operation: str,
    context: Optional[List[Tuple[str, str]]] = None,
) -> None:
    """
    Log a Discord HTTPException at a level matching its status.

    Args:
        e: The HTTPException that occurred
        operation: Description of what operation failed
        context: Additional context tuples for logging [(key, value), ...]
    """
    status_desc = HTTP_STATUS_DESCRIPTIONS.get(e.status, "Unknown")

    log_items = [
        ("Status", f"{e.status} ({status_desc})"),
        ("Error", str(e.text) if getattr(e, "text", None) else str(e)),
    ]

    if context:
        log_items.extend(context)

    if is_missing_permissions(e):
        logger.warning(f"{operation} Forbidden", log_items)
    elif e.status == 429:
        logger.warning(f"{operation} Rate Limited", log_items)
    elif e.status == 404:
        logger.warning(f"{operation} Not Found", log_items)
    else:
        logger.error(f"{operation} Failed", log_items)


__all__ = ["is_missing_permissions", "log_http_error"]
