"""Discord webhook API client with provider-specific error handling.

Posts plain-text messages to a Discord webhook and turns Discord's JSON
error bodies into DiscordAPIError. Each call is a single attempt; rate
limit responses are reported with their ``retry_after`` hint but not
waited out.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final

from sizechecker.plugins.discord.config import DiscordConfig
from sizechecker.types import HTTPClient, Response

__all__ = [
    "DiscordAPIClient",
    "DiscordAPIError",
    "DiscordRateLimitError",
]

_SUCCESS_STATUSES: Final[tuple[int, ...]] = (200, 201, 202, 204)
_DEFAULT_ALLOWED_MENTIONS: Final[dict[str, list[str]]] = {"parse": []}
_MAX_CONTENT_LENGTH: Final[int] = 2000
_TRUNCATION_SUFFIX: Final[str] = "..."


class DiscordAPIError(RuntimeError):
    """Base exception for Discord API failures."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        code: int | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message)
        self.status: int = status
        self.code: int | None = code
        self.retry_after: float | None = retry_after


class DiscordRateLimitError(DiscordAPIError):
    """Raised when Discord responds with a rate limit error."""

    def __init__(self, *, retry_after: float | None, message: str, is_global: bool) -> None:
        super().__init__(
            message,
            status=429,
            retry_after=retry_after,
        )
        self.is_global: bool = is_global


@dataclass(slots=True)
class DiscordAPIClient:
    """HTTP client wrapper for posting to a Discord webhook."""

    config: DiscordConfig
    http_client: HTTPClient
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def send_message(self, content: str) -> Response:
        """Post a plain-text message to the webhook.

        Raises:
            ValueError: If ``content`` is blank
            DiscordAPIError: If Discord rejects the message
        """
        payload = self._build_payload(content)
        response = await self.http_client.post(self.config.webhook_url, payload)

        if response.status in _SUCCESS_STATUSES:
            self._logger.debug("Discord webhook delivered (status=%d)", response.status)
            return response

        if response.status == 429:
            raise self._build_rate_limit_error(response)

        raise self._build_api_error(response)

    def _build_payload(self, content: str) -> dict[str, object]:
        """Assemble the JSON body sent to the webhook endpoint."""
        normalized = content.strip()
        if not normalized:
            msg = "Discord webhook payload requires a non-empty content message"
            raise ValueError(msg)

        if len(normalized) > _MAX_CONTENT_LENGTH:
            keep = _MAX_CONTENT_LENGTH - len(_TRUNCATION_SUFFIX)
            normalized = normalized[:keep] + _TRUNCATION_SUFFIX

        payload: dict[str, object] = {
            "content": normalized,
            "allowed_mentions": dict(_DEFAULT_ALLOWED_MENTIONS),
        }
        if self.config.username:
            payload["username"] = self.config.username
        return payload

    def _build_rate_limit_error(self, response: Response) -> DiscordRateLimitError:
        body = dict(response.body)
        retry_after = self._coerce_float(body.get("retry_after"))
        if retry_after is None:
            retry_after = self._coerce_float(response.headers.get("Retry-After"))
        is_global = bool(body.get("global", False))

        self._logger.warning(
            "Discord rate limit encountered (global=%s, retry_after=%s)",
            is_global,
            retry_after,
        )
        return DiscordRateLimitError(
            retry_after=retry_after,
            message=self._extract_message(body) or "Discord rate limit reached",
            is_global=is_global,
        )

    def _build_api_error(self, response: Response) -> DiscordAPIError:
        """Create a DiscordAPIError from a non-successful response."""
        body = dict(response.body)
        message = self._extract_message(body) or f"Discord API responded with {response.status}"
        code = self._extract_error_code(body)
        details = self._format_error_details(body.get("errors"))

        if details:
            message = f"{message}: {details}"

        return DiscordAPIError(message, status=response.status, code=code)

    def _extract_message(self, body: Mapping[str, object]) -> str | None:
        message = body.get("message")
        return message if isinstance(message, str) else None

    def _extract_error_code(self, body: Mapping[str, object]) -> int | None:
        code = body.get("code")
        if isinstance(code, int):
            return code
        if isinstance(code, str) and code.isdigit():
            return int(code)
        return None

    def _format_error_details(self, details: object) -> str | None:
        """Serialize nested Discord error structures into a readable string."""
        if details is None:
            return None
        try:
            return json.dumps(details, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError):
            return str(details)

    def _coerce_float(self, value: object) -> float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return None
        return None
