"""
Autumn Moderation Bot - Async Utilities
=======================================

Concurrent best-effort side effects (DMs, modlog posts, timeouts).
"""

import asyncio
from typing import Any, Awaitable, Dict, Optional, Tuple

from autumn.core.logger import logger


async def gather_with_logging(
    *operations: Tuple[str, Awaitable[Any]],
    context: Optional[str] = None,
) -> Dict[str, bool]:
    """
    Run named operations together and report which of them succeeded.

    Sink calls return False after logging their own failure, so only
    exceptions are logged here. An exception never cancels the siblings.

    Args:
        *operations: (name, awaitable) pairs.
        context: Prefixed to failure logs, e.g. "Escalation".

    Returns:
        Mapping of operation name to success. A result of False or an
        exception counts as failure.

    Example:
        outcome = await gather_with_logging(
            ("Publish Case", sink.publish_case(guild_id, embed)),
            ("DM User", sink.send_dm(user, guild_id, "warned", reason, None)),
            context="Warn Command",
        )
    """
    if not operations:
        return {}

    results = await asyncio.gather(
        *(awaitable for _, awaitable in operations),
        return_exceptions=True,
    )

    outcome: Dict[str, bool] = {}
    for (name, _), result in zip(operations, results):
        if isinstance(result, Exception):
            details = [
                ("Operation", name),
                ("Error Type", type(result).__name__),
                ("Error", str(result)[:100]),
            ]
            if context:
                details.insert(0, ("Context", context))
            logger.warning("Side Effect Failed", details)
            outcome[name] = False
        else:
            outcome[name] = result is not False

    return outcome


__all__ = ["gather_with_logging"]
