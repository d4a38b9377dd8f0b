"""Data models for the sizechecker application.

This module defines the small immutable records passed between the probe,
the threshold evaluator, the notifiers and the HTTP layer.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class RunType(StrEnum):
    """Which quantity is measured and how the limit is interpreted."""

    USED = "u"  # Total bytes of files under the directory; limit is a maximum
    AVAILABLE = "a"  # Free bytes on the containing filesystem; limit is a minimum


@dataclass(slots=True, frozen=True)
class Verdict:
    """Outcome of comparing a measured size against a limit.

    ``message`` is the line shown to the operator and, when ``violated`` is
    true, the text delivered to every notifier.
    """

    violated: bool
    message: str
    measured_bytes: int
    limit_bytes: int
    run_type: RunType
    path: Path


@dataclass(slots=True)
class NotificationResult:
    """Result of a notification delivery attempt.

    Captures the outcome of sending a message to a provider, including
    success status, timing, and error details if applicable.
    """

    success: bool
    provider_name: str
    error_message: str | None
    delivery_time_ms: float


@dataclass(slots=True)
class Response:
    """HTTP response.

    Represents an HTTP response with status code, body, and headers.
    """

    status: int
    body: Mapping[str, object]
    headers: Mapping[str, str]
