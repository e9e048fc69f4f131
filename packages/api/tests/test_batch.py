"""Tests for the monthly batch CLI entrypoint."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fairlend.batch import main

BATCH = "fairlend.batch"


@pytest.mark.asyncio
@patch(f"{BATCH}.get_db_service")
@patch(f"{BATCH}.run_monthly_batch", new_callable=AsyncMock, return_value=3)
@patch(f"{BATCH}.SessionLocal", new_callable=MagicMock)
async def test_main_reports_same_shape_as_http_route(_mock_session, mock_batch, mock_service):
    mock_service.return_value.close = AsyncMock()

    result = await main()

    assert result == {"success": True, "notificationsCreated": 3}
    mock_batch.assert_awaited_once()
    mock_service.return_value.close.assert_awaited_once()


@pytest.mark.asyncio
@patch(f"{BATCH}.get_db_service")
@patch(f"{BATCH}.run_monthly_batch", new_callable=AsyncMock, side_effect=RuntimeError("db down"))
@patch(f"{BATCH}.SessionLocal", new_callable=MagicMock)
async def test_main_closes_database_on_failure(_mock_session, _mock_batch, mock_service):
    mock_service.return_value.close = AsyncMock()

    with pytest.raises(RuntimeError):
        await main()

    mock_service.return_value.close.assert_awaited_once()
