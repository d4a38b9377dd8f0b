"""Pushover messages API client.

Sends one form-encoded POST per message. Pushover answers with a JSON body
whose ``status`` is 1 on success; on failure it carries an ``errors`` list
that is surfaced verbatim in PushoverAPIError.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final

from sizechecker.plugins.pushover.config import PushoverConfig
from sizechecker.types import HTTPClient, Response

__all__ = ["PushoverAPIClient", "PushoverAPIError"]

_MAX_MESSAGE_LENGTH: Final[int] = 1024
_TRUNCATION_SUFFIX: Final[str] = "..."


class PushoverAPIError(RuntimeError):
    """Raised when Pushover rejects a message."""

    def __init__(self, message: str, *, status: int, request_id: str | None = None) -> None:
        super().__init__(message)
        self.status: int = status
        self.request_id: str | None = request_id


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - len(_TRUNCATION_SUFFIX)] + _TRUNCATION_SUFFIX


@dataclass(slots=True)
class PushoverAPIClient:
    """HTTP client wrapper for the Pushover messages endpoint."""

    config: PushoverConfig
    http_client: HTTPClient
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def send_message(self, message: str) -> Response:
        """Push ``message`` titled with the configured destination.

        Raises:
            ValueError: If ``message`` is blank
            PushoverAPIError: If Pushover does not accept the message
        """
        payload = self._build_payload(message)
        response = await self.http_client.post(self.config.api_url, payload, form=True)

        body = dict(response.body)
        request_id = body.get("request")
        request_id = request_id if isinstance(request_id, str) else None

        if response.status == 200 and body.get("status") == 1:
            self._logger.debug("Pushover message accepted (request=%s)", request_id)
            return response

        raise PushoverAPIError(
            self._describe_failure(response.status, body),
            status=response.status,
            request_id=request_id,
        )

    def _build_payload(self, message: str) -> dict[str, object]:
        normalized = message.strip()
        if not normalized:
            msg = "Pushover message cannot be empty"
            raise ValueError(msg)

        return {
            "token": self.config.api_token.get_secret_value(),
            "user": self.config.user_key.get_secret_value(),
            "message": _truncate(normalized, _MAX_MESSAGE_LENGTH),
            "title": self.config.destination,
        }

    def _describe_failure(self, status: int, body: Mapping[str, object]) -> str:
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            details = "; ".join(str(error) for error in errors)  # pyright: ignore[reportUnknownVariableType, reportUnknownArgumentType]
            return f"Pushover rejected the message (status={status}): {details}"
        return f"Pushover API responded with {status}"
