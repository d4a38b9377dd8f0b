"""Pushover notification provider implementation.

Credentials are resolved from the environment at send time, so a missing
``PUSHOVER_APITOKEN`` or ``PUSHOVER_USERKEY`` surfaces as a failed
delivery for this provider alone rather than stopping the check.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final

from pydantic import ValidationError

from sizechecker.plugins.pushover.client import PushoverAPIClient, PushoverAPIError
from sizechecker.plugins.pushover.config import DEFAULT_API_URL, PushoverConfig, PushoverCredentialsError
from sizechecker.types import HTTPClient, NotificationResult
from sizechecker.utils.sanitization import sanitize_exception

__all__ = ["PushoverProvider", "create_provider"]

_PROVIDER_NAME: Final[str] = "Pushover"


@dataclass(slots=True)
class PushoverProvider:
    """Pushover notification provider implementing the Notifier Protocol.

    Attributes:
        target: The ``-o`` destination string; also the cooldown key
        http_client: HTTP client for API delivery (injected dependency)
        environ: Environment to read credentials from, ``None`` for ``os.environ``
        api_url: Messages endpoint, overridable for relays
    """

    target: str
    http_client: HTTPClient
    environ: Mapping[str, str] | None = None
    api_url: str = DEFAULT_API_URL
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return _PROVIDER_NAME

    @property
    def destination(self) -> str:
        return self.target

    async def send_notification(self, message: str) -> NotificationResult:
        """Deliver ``message`` through the Pushover API.

        Returns:
            Result of the delivery attempt including timing and error details
        """
        start_time = time.perf_counter()

        try:
            config = PushoverConfig.from_environment(self.target, self.environ, api_url=self.api_url)
        except PushoverCredentialsError as exc:
            return self._failure(str(exc), start_time)
        except ValidationError as exc:
            return self._failure(f"Invalid Pushover configuration: {exc.error_count()} error(s)", start_time)

        secrets = (config.api_token.get_secret_value(), config.user_key.get_secret_value())
        client = PushoverAPIClient(config=config, http_client=self.http_client)

        try:
            _ = await client.send_message(message)
        except PushoverAPIError as exc:
            return self._failure(str(exc), start_time)
        except Exception as exc:
            detail = sanitize_exception(exc, secrets=secrets)
            error_msg = f"Unexpected error during Pushover notification: {detail}"
            self._logger.debug("Pushover delivery raised", exc_info=True)
            return self._failure(error_msg, start_time)

        delivery_time_ms = (time.perf_counter() - start_time) * 1000.0
        self._logger.debug("Pushover notification delivered (delivery_time=%.2fms)", delivery_time_ms)
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


def create_provider(
    *,
    target: str,
    http_client: HTTPClient,
    environ: Mapping[str, str] | None = None,
) -> PushoverProvider:
    """Factory function for creating PushoverProvider instances."""
    return PushoverProvider(target=target, http_client=http_client, environ=environ)
