"""Type definitions and protocols for the sizechecker application.

This package provides:
- Data models (immutable dataclasses and enums)
- Protocol definitions (structural subtyping interfaces)
"""

from sizechecker.types.models import (
    NotificationResult,
    Response,
    RunType,
    Verdict,
)
from sizechecker.types.protocols import (
    HTTPClient,
    Notifier,
)

__all__ = [
    # Data models
    "NotificationResult",
    "Response",
    "RunType",
    "Verdict",
    # Protocols
    "HTTPClient",
    "Notifier",
]
