"""Discord provider configuration schema."""

from __future__ import annotations

from typing import Annotated
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DiscordConfig(BaseModel):
    """Pydantic schema for Discord webhook configuration."""

    model_config = ConfigDict(frozen=True)

    webhook_url: Annotated[
        str,
        Field(
            description="Discord webhook URL created from the channel's integrations menu",
        ),
    ]
    username: Annotated[
        str | None,
        Field(
            description="Optional override for the webhook display name",
            min_length=1,
            max_length=80,
        ),
    ] = None

    @field_validator("webhook_url")
    @classmethod
    def validate_webhook_url(cls, value: str) -> str:
        """Validate that the webhook URL is an absolute http(s) URL."""
        cleaned = value.strip()
        parsed = urlparse(cleaned)
        if parsed.scheme.lower() not in ("http", "https"):
            msg = "Webhook URL must use http or https"
            raise ValueError(msg)
        if not parsed.hostname:
            msg = "Webhook URL must include a host"
            raise ValueError(msg)
        return cleaned

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str | None) -> str | None:
        """Normalize and validate the optional username."""
        if value is None:
            return None
        trimmed = value.strip()
        if not trimmed:
            msg = "Username cannot be empty when provided"
            raise ValueError(msg)
        return trimmed
