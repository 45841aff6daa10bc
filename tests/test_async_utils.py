"""
Autumn Moderation Bot - Async Utility Tests
===========================================

Tests for gather_with_logging.
"""

from unittest.mock import AsyncMock, patch

import pytest

from autumn.utils.async_utils import gather_with_logging


class TestGatherWithLogging:
    """Tests for gather_with_logging."""

    @pytest.mark.asyncio
    async def test_reports_each_outcome(self):
        ok = AsyncMock(return_value=True)
        declined = AsyncMock(return_value=False)

        outcome = await gather_with_logging(
            ("Publish Case", ok()),
            ("DM User", declined()),
        )

        assert outcome == {"Publish Case": True, "DM User": False}

    @pytest.mark.asyncio
    async def test_none_result_counts_as_success(self):
        outcome = await gather_with_logging(("Delete Message", AsyncMock(return_value=None)()))
        assert outcome == {"Delete Message": True}

    @pytest.mark.asyncio
    async def test_exception_logged_and_siblings_run(self):
        sibling = AsyncMock(return_value=True)

        with patch("autumn.utils.async_utils.logger") as mock_logger:
            outcome = await gather_with_logging(
                ("DM User", AsyncMock(side_effect=RuntimeError("dm closed"))()),
                ("Publish Case", sibling()),
                context="Escalation",
            )

        assert outcome == {"DM User": False, "Publish Case": True}
        sibling.assert_awaited_once()
        title, details = mock_logger.warning.call_args.args
        assert title == "Side Effect Failed"
        assert details[0] == ("Context", "Escalation")
        assert ("Error", "dm closed") in details

    @pytest.mark.asyncio
    async def test_no_operations(self):
        assert await gather_with_logging() == {}
