"""Tests for the Discord webhook API client."""

from __future__ import annotations

import pytest
from conftest import MockHTTPClient, as_http_client

from sizechecker.plugins.discord import (
    DiscordAPIClient,
    DiscordAPIError,
    DiscordConfig,
    DiscordRateLimitError,
)
from sizechecker.types import Response


def _client(http_client: MockHTTPClient, webhook_url: str, username: str | None = None) -> DiscordAPIClient:
    config = DiscordConfig(webhook_url=webhook_url, username=username)
    return DiscordAPIClient(config=config, http_client=as_http_client(http_client))


class TestSendMessage:
    async def test_posts_plain_content_without_mentions(
        self,
        mock_http_client: MockHTTPClient,
        webhook_url: str,
    ) -> None:
        response = await _client(mock_http_client, webhook_url).send_message("Disk almost full @everyone")

        assert response.status == 204
        mock_http_client.post.assert_awaited_once_with(
            webhook_url,
            {"content": "Disk almost full @everyone", "allowed_mentions": {"parse": []}},
        )

    async def test_username_included_when_configured(
        self,
        mock_http_client: MockHTTPClient,
        webhook_url: str,
    ) -> None:
        _ = await _client(mock_http_client, webhook_url, username="Disk Bot").send_message("hello")

        payload = mock_http_client.post.await_args.args[1]  # pyright: ignore[reportAny, reportOptionalMemberAccess]
        assert payload["username"] == "Disk Bot"

    async def test_long_content_truncated(self, mock_http_client: MockHTTPClient, webhook_url: str) -> None:
        _ = await _client(mock_http_client, webhook_url).send_message("x" * 2500)

        payload = mock_http_client.post.await_args.args[1]  # pyright: ignore[reportAny, reportOptionalMemberAccess]
        assert len(payload["content"]) == 2000  # pyright: ignore[reportAny]
        assert payload["content"].endswith("...")  # pyright: ignore[reportAny]

    async def test_blank_content_rejected(self, mock_http_client: MockHTTPClient, webhook_url: str) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            _ = await _client(mock_http_client, webhook_url).send_message("   ")
        mock_http_client.post.assert_not_awaited()

    @pytest.mark.parametrize("status", [200, 201, 202, 204])
    async def test_success_statuses(self, webhook_url: str, status: int) -> None:
        http_client = MockHTTPClient(Response(status=status, body={}, headers={}))
        response = await _client(http_client, webhook_url).send_message("ok")
        assert response.status == status

    async def test_rate_limit_error(self, webhook_url: str) -> None:
        http_client = MockHTTPClient(
            Response(
                status=429,
                body={"message": "You are being rate limited.", "retry_after": 1.5, "global": False},
                headers={},
            )
        )

        with pytest.raises(DiscordRateLimitError) as exc_info:
            _ = await _client(http_client, webhook_url).send_message("hello")

        assert exc_info.value.status == 429
        assert exc_info.value.retry_after == 1.5
        assert not exc_info.value.is_global

    async def test_rate_limit_falls_back_to_header(self, webhook_url: str) -> None:
        http_client = MockHTTPClient(Response(status=429, body={}, headers={"Retry-After": "3"}))

        with pytest.raises(DiscordRateLimitError) as exc_info:
            _ = await _client(http_client, webhook_url).send_message("hello")

        assert exc_info.value.retry_after == 3.0

    async def test_api_error_carries_code_and_details(self, webhook_url: str) -> None:
        http_client = MockHTTPClient(
            Response(
                status=400,
                body={"message": "Invalid Form Body", "code": 50035, "errors": {"content": ["too long"]}},
                headers={},
            )
        )

        with pytest.raises(DiscordAPIError, match="Invalid Form Body") as exc_info:
            _ = await _client(http_client, webhook_url).send_message("hello")

        assert exc_info.value.status == 400
        assert exc_info.value.code == 50035
        assert "too long" in str(exc_info.value)

    async def test_api_error_without_body(self, webhook_url: str) -> None:
        http_client = MockHTTPClient(Response(status=404, body={}, headers={}))

        with pytest.raises(DiscordAPIError, match="Discord API responded with 404"):
            _ = await _client(http_client, webhook_url).send_message("hello")
