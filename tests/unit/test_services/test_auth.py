"""Unit tests for gcloud token acquisition"""

import pytest
from unittest.mock import AsyncMock, patch

from docextract.services.auth import get_access_token
from docextract.utils.exceptions import AuthenticationError, GCloudCommandError


@pytest.mark.asyncio
async def test_returns_token():
    with patch(
        "docextract.services.auth.run_gcloud", AsyncMock(return_value="ya29.token")
    ) as mock_run:
        token = await get_access_token()

    assert token == "ya29.token"
    assert mock_run.call_args.args == ("auth", "print-access-token")
    assert mock_run.call_args.kwargs["timeout_seconds"] == 30.0


@pytest.mark.asyncio
async def test_missing_gcloud():
    error = GCloudCommandError("gcloud CLI not found on PATH")
    with patch("docextract.services.auth.run_gcloud", AsyncMock(side_effect=error)):
        with pytest.raises(AuthenticationError, match="not found"):
            await get_access_token()


@pytest.mark.asyncio
async def test_nonzero_exit_reports_stderr():
    error = GCloudCommandError(
        "gcloud auth print-access-token failed: not logged in",
        stderr="not logged in",
        returncode=1,
    )
    with patch("docextract.services.auth.run_gcloud", AsyncMock(side_effect=error)):
        with pytest.raises(
            AuthenticationError, match="Failed to get access token: not logged in"
        ):
            await get_access_token()


@pytest.mark.asyncio
async def test_timeout():
    error = GCloudCommandError("gcloud auth print-access-token timed out after 0.1s")
    with patch("docextract.services.auth.run_gcloud", AsyncMock(side_effect=error)):
        with pytest.raises(AuthenticationError, match="timed out"):
            await get_access_token(timeout_seconds=0.1)


@pytest.mark.asyncio
async def test_empty_token():
    with patch("docextract.services.auth.run_gcloud", AsyncMock(return_value="")):
        with pytest.raises(AuthenticationError, match="empty"):
            await get_access_token()
