"""HTTP client abstraction for webhook notification delivery.

This module provides the aiohttp-backed implementation of the HTTPClient
Protocol used by the notifier plugins. Each call is a single attempt: a
failed delivery is reported to the caller and waits for the next scheduled
run of the checker rather than being retried here. No total timeout is set
by default, so a send is bounded only by the network stack.
"""

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Self

import aiohttp

from sizechecker.types.models import Response


class AIOHTTPClient:
    """Async HTTP client implementing the HTTPClient Protocol.

    Example:
        >>> async with AIOHTTPClient() as client:
        ...     response = await client.post(
        ...         "https://webhook.example.com/notify",
        ...         {"content": "disk almost full"},
        ...     )
    """

    def __init__(self, *, timeout_seconds: float | None = None) -> None:
        """Initialize the HTTP client.

        Args:
            timeout_seconds: Optional total timeout per request in seconds;
                ``None`` leaves requests unbounded
        """
        if timeout_seconds is not None and timeout_seconds <= 0:
            msg = "timeout_seconds must be positive"
            raise ValueError(msg)

        self._timeout_seconds: float | None = timeout_seconds

        # aiohttp session (created in __aenter__)
        self._session: aiohttp.ClientSession | None = None

        self._logger: logging.Logger = logging.getLogger(__name__)

    async def __aenter__(self) -> Self:
        """Enter async context manager and create the aiohttp session."""
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=None),
            json_serialize=json.dumps,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context manager and close the session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

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
            form: Send the payload form-encoded instead of as JSON

        Returns:
            HTTP response with status, body, and headers; a body that is not
            a JSON object is returned as an empty mapping

        Raises:
            RuntimeError: If called outside the async context manager
            ValueError: If the URL is malformed
            TimeoutError: If the optional timeout elapses
            aiohttp.ClientError: For connection issues
        """
        if self._session is None:
            msg = "HTTP client session not initialized. Use 'async with' context manager."
            raise RuntimeError(msg)

        self._logger.debug("Initiating POST request to %s", url)

        request_kwargs: dict[str, object]
        if form:
            request_kwargs = {"data": {key: str(value) for key, value in payload.items()}}
        else:
            request_kwargs = {"json": dict(payload)}

        try:
            async with asyncio.timeout(self._timeout_seconds):
                async with self._session.post(url, **request_kwargs) as response:  # pyright: ignore[reportArgumentType]
                    body: Mapping[str, object]
                    try:
                        parsed: object = await response.json(content_type=None)
                    except (aiohttp.ContentTypeError, ValueError):
                        parsed = None
                    body = parsed if isinstance(parsed, dict) else {}  # pyright: ignore[reportUnknownVariableType]

                    return Response(
                        status=response.status,
                        body=body,
                        headers=dict(response.headers),
                    )
        except TimeoutError:
            self._logger.warning("Request to %s timed out after %.1fs", url, self._timeout_seconds)
            raise
        except aiohttp.InvalidURL as exc:
            self._logger.error("Invalid URL: %s", url)
            raise ValueError(f"Malformed URL: {url}") from exc
        except aiohttp.ClientError as exc:
            self._logger.warning("Client error for %s: %s", url, exc)
            raise
