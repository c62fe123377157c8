"""Shared fixtures for source connector tests."""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from intake.infrastructure.http_client import HTTPClient


@pytest.fixture
def mock_http_client() -> HTTPClient:
    """Create a mock HTTP client."""
    client = MagicMock(spec=HTTPClient)
    client.get = AsyncMock()
    client.post = AsyncMock()
    return client


@pytest.fixture
def create_mock_response() -> Callable[..., MagicMock]:
    """Factory for mock HTTP responses.

    Pass `status_code` >= 400 to make raise_for_status() raise, and
    `json_error` to make json() raise.
    """

    def _create(
        json_data: Any = None,
        status_code: int = 200,
        json_error: Exception | None = None,
    ) -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        response.raise_for_status = MagicMock()
        if status_code >= 400:
            response.raise_for_status.side_effect = httpx.HTTPStatusError(
                f"HTTP {status_code}",
                request=MagicMock(),
                response=MagicMock(status_code=status_code),
            )
        if json_error is not None:
            response.json.side_effect = json_error
        else:
            response.json.return_value = json_data
        return response

    return _create
