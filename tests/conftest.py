"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import cast
from unittest.mock import AsyncMock

import pytest

from sizechecker.types import HTTPClient, NotificationResult, Response
from sizechecker.utils.logging import clear_correlation_id

WEBHOOK_URL = "https://discord.com/api/webhooks/123456789/abcdefgh-token"


@pytest.fixture(autouse=True)
def _reset_correlation_id() -> Iterator[None]:  # pyright: ignore[reportUnusedFunction]
    """Forget the correlation ID between tests."""
    yield
    clear_correlation_id()


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    """Provide an empty directory for cooldown records."""
    directory = tmp_path / "state"
    directory.mkdir()
    return directory


@pytest.fixture
def webhook_url() -> str:
    return WEBHOOK_URL


class MockHTTPClient:
    """HTTP client double whose ``post`` is an AsyncMock."""

    def __init__(self, response: Response | None = None) -> None:
        self.post: AsyncMock = AsyncMock(return_value=response or Response(status=204, body={}, headers={}))


@pytest.fixture
def mock_http_client() -> MockHTTPClient:
    return MockHTTPClient()


def as_http_client(client: MockHTTPClient) -> HTTPClient:
    return cast(HTTPClient, client)


class FakeNotifier:
    """Notifier double that records every message it is asked to send."""

    def __init__(
        self,
        *,
        name: str = "Fake",
        destination: str = "fake-destination",
        succeed: bool = True,
    ) -> None:
        self._name: str = name
        self._destination: str = destination
        self.succeed: bool = succeed
        self.sent: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def destination(self) -> str:
        return self._destination

    async def send_notification(self, message: str) -> NotificationResult:
        self.sent.append(message)
        return NotificationResult(
            success=self.succeed,
            provider_name=self._name,
            error_message=None if self.succeed else "destination rejected the message",
            delivery_time_ms=1.0,
        )
