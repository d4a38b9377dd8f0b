"""Secret sanitization utilities for logging and error messages.

Webhook URLs and push-service credentials are secrets: anyone holding them
can post to the channel. This module redacts them from strings, URLs and
structured data before they reach log output or error text.

Examples:
    >>> sanitize_url("https://chat.example.com/api/webhooks/123/secret_token")
    'https://chat.example.com/api/webhooks/123/<REDACTED>'

    >>> sanitize_value({"api_token": "abc", "count": 42})
    {'api_token': '<REDACTED>', 'count': 42}
"""

from __future__ import annotations

import re
from collections.abc import Collection, Mapping, Sequence
from typing import Final

# Redaction marker for sanitized values
REDACTED: Final[str] = "<REDACTED>"

# Webhook URLs of the form .../api/webhooks/<id>/<token>
_WEBHOOK_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(https?://[^\s/]+/api/webhooks/\d+/)([^/?#\s]+)",
    re.IGNORECASE,
)

# Tokens carried in path segments, e.g. /token/<value>
_GENERIC_TOKEN_IN_PATH: Final[re.Pattern[str]] = re.compile(
    r"(/(?:token|api[-_]?key|auth|secret|bearer)[=/])([^/?#\s]+)",
    re.IGNORECASE,
)

# Tokens carried in query or form parameters, e.g. ?token=<value>&user=<value>
_GENERIC_TOKEN_IN_QUERY: Final[re.Pattern[str]] = re.compile(
    r"([?&](?:token|user|api[-_]?key|auth|secret|bearer)=)([^&\s]+)",
    re.IGNORECASE,
)

# Sensitive field name patterns (case-insensitive)
_SENSITIVE_FIELD_PATTERNS: Final[tuple[re.Pattern[str], ...]] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r".*token.*",
        r".*key.*",
        r".*secret.*",
        r".*password.*",
        r".*credential.*",
        r".*auth.*",
        r".*webhook.*",
    )
)

def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data.

    Examples:
        >>> is_sensitive_field("api_token")
        True
        >>> is_sensitive_field("webhook_url")
        True
        >>> is_sensitive_field("path")
        False
    """
    return any(pattern.match(field_name) for pattern in _SENSITIVE_FIELD_PATTERNS)


def sanitize_url(url: str, *, secrets: Collection[str] = ()) -> str:
    """Sanitize secret tokens from URLs and free text while preserving structure.

    Scheme, host and path shape are kept so the output stays useful for
    debugging; only the secret parts are replaced with ``<REDACTED>``.

    Args:
        url: URL or arbitrary text that may contain URLs
        secrets: Literal credential values with no recognisable URL shape,
            such as push service API tokens, redacted wherever they appear

    Returns:
        Text with tokens replaced by the redaction marker
    """
    if not url:
        return url

    sanitized = _WEBHOOK_TOKEN_PATTERN.sub(rf"\1{REDACTED}", url)
    sanitized = _GENERIC_TOKEN_IN_PATH.sub(rf"\1{REDACTED}", sanitized)
    sanitized = _GENERIC_TOKEN_IN_QUERY.sub(rf"\1{REDACTED}", sanitized)

    # Longest first so a secret containing another secret is fully covered
    for secret in sorted((s for s in secrets if s), key=len, reverse=True):
        sanitized = sanitized.replace(secret, REDACTED)

    return sanitized


def sanitize_value(
    value: object,
    *,
    field_name: str | None = None,
    secrets: Collection[str] = (),
) -> object:
    """Recursively sanitize sensitive values from structured data.

    Args:
        value: The value to sanitize (any type)
        field_name: Optional field name for context-aware sanitization
        secrets: Literal credential values to redact from strings

    Returns:
        Sanitized value; mappings and sequences are rebuilt, other objects
        are converted to sanitized strings

    Examples:
        >>> sanitize_value({"user_key": "u123", "bytes": 10})
        {'user_key': '<REDACTED>', 'bytes': 10}
    """
    if field_name and is_sensitive_field(field_name):
        return REDACTED

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        return sanitize_url(value, secrets=secrets)

    if isinstance(value, Mapping):
        return {
            str(key): sanitize_value(val, field_name=str(key), secrets=secrets)  # pyright: ignore[reportUnknownArgumentType]
            for key, val in value.items()  # pyright: ignore[reportUnknownVariableType]
        }

    if isinstance(value, Sequence) and not isinstance(value, bytes):
        items = [sanitize_value(item, secrets=secrets) for item in value]  # pyright: ignore[reportUnknownVariableType]
        return tuple(items) if isinstance(value, tuple) else items

    return sanitize_url(str(value), secrets=secrets)


def sanitize_exception(exc: BaseException, *, secrets: Collection[str] = ()) -> str:
    """Render an exception as ``Type: message`` with secrets removed.

    Examples:
        >>> sanitize_exception(ValueError("bad https://x.io/api/webhooks/1/abc"))
        'ValueError: bad https://x.io/api/webhooks/1/<REDACTED>'
    """
    return f"{type(exc).__name__}: {sanitize_url(str(exc), secrets=secrets)}"


def sanitize_args(args: tuple[object, ...], *, secrets: Collection[str] = ()) -> tuple[object, ...]:
    """Sanitize a tuple of logging arguments."""
    return tuple(sanitize_value(arg, secrets=secrets) for arg in args)
