"""Protocol definitions for component interfaces.

This module defines structural subtyping protocols that establish
contracts between the dispatch core and the notifier plugins without
requiring inheritance.
"""

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from sizechecker.types.models import NotificationResult, Response


@runtime_checkable
class Notifier(Protocol):
    """Protocol for notification delivery providers.

    A notifier owns one destination. ``destination`` doubles as the key of
    the notifier's cooldown record, so two notifiers configured with the
    same destination string share a cooldown.
    """

    @property
    def name(self) -> str:
        """Human-readable provider name used in log and status lines."""
        ...

    @property
    def destination(self) -> str:
        """Stable identifier of the delivery target."""
        ...

    async def send_notification(self, message: str) -> NotificationResult:
        """Deliver a message to the provider platform.

        Implementations must not raise for delivery failures; they report
        them through an unsuccessful result instead.

        Args:
            message: Plain-text message body

        Returns:
            Result of the delivery attempt including timing and error details
        """
        ...


class HTTPClient(Protocol):
    """Protocol for HTTP client operations used by notifier plugins."""

    async def post(
        self,
        url: str,
        payload: Mapping[str, object],
        *,
        form: bool = False,
    ) -> Response:
        """Send a single HTTP POST request.

        Args:
            url: Target URL for the POST request
            payload: Request body data
            form: Encode the payload as ``application/x-www-form-urlencoded``
                instead of JSON

        Returns:
            HTTP response with status, body, and headers
        """
        ...
