"""Discord notification provider implementation.

Implements the Notifier Protocol for Discord webhooks by wiring the
Discord configuration to the API client, measuring delivery time and
converting API failures into unsuccessful results.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Final

from sizechecker.plugins.discord.client import DiscordAPIClient, DiscordAPIError
from sizechecker.plugins.discord.config import DiscordConfig
from sizechecker.types import HTTPClient, NotificationResult
from sizechecker.utils.sanitization import sanitize_exception

__all__ = ["DiscordProvider", "create_provider"]

_PROVIDER_NAME: Final[str] = "Discord"


@dataclass(slots=True)
class DiscordProvider:
    """Discord notification provider implementing the Notifier Protocol.

    Attributes:
        config: Discord-specific configuration including webhook URL
        http_client: HTTP client for webhook delivery (injected dependency)
        client: Discord API client built from the two above
    """

    config: DiscordConfig
    http_client: HTTPClient
    client: DiscordAPIClient = field(init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.client = DiscordAPIClient(config=self.config, http_client=self.http_client)
        self._logger = logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return _PROVIDER_NAME

    @property
    def destination(self) -> str:
        return self.config.webhook_url

    async def send_notification(self, message: str) -> NotificationResult:
        """Deliver ``message`` to the Discord webhook.

        Returns:
            Result of the delivery attempt including timing and error details
        """
        start_time = time.perf_counter()

        try:
            _ = await self.client.send_message(message)
        except DiscordAPIError as exc:
            error_msg = f"Discord API error (status={exc.status}): {exc}"
            return self._failure(error_msg, start_time)
        except Exception as exc:
            # Network failures, malformed URLs and anything else aiohttp raises
            error_msg = f"Unexpected error during Discord notification: {sanitize_exception(exc)}"
            self._logger.debug("Discord delivery raised", exc_info=True)
            return self._failure(error_msg, start_time)

        delivery_time_ms = (time.perf_counter() - start_time) * 1000.0
        self._logger.debug("Discord notification delivered (delivery_time=%.2fms)", delivery_time_ms)
        return NotificationResult(
            success=True,
            provider_name=_PROVIDER_NAME,
            error_message=None,
            delivery_time_ms=delivery_time_ms,
        )

    def _failure(self, error_msg: str, start_time: float) -> NotificationResult:
        return NotificationResult(
            success=False,
            provider_name=_PROVIDER_NAME,
            error_message=error_msg,
            delivery_time_ms=(time.perf_counter() - start_time) * 1000.0,
        )


def create_provider(*, config: DiscordConfig, http_client: HTTPClient) -> DiscordProvider:
    """Factory function for creating DiscordProvider instances.

    Example:
        >>> config = DiscordConfig(webhook_url="https://discord.com/api/webhooks/123/abc")
        >>> provider = create_provider(config=config, http_client=SomeHTTPClient())
    """
    return DiscordProvider(config=config, http_client=http_client)
