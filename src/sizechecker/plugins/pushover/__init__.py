"""Pushover push-notification notifier plugin."""

from sizechecker.plugins.pushover.client import PushoverAPIClient, PushoverAPIError
from sizechecker.plugins.pushover.config import (
    API_TOKEN_ENV,
    USER_KEY_ENV,
    PushoverConfig,
    PushoverCredentialsError,
    credential_values,
)
from sizechecker.plugins.pushover.provider import PushoverProvider, create_provider

__all__ = [
    "API_TOKEN_ENV",
    "USER_KEY_ENV",
    "PushoverAPIClient",
    "PushoverAPIError",
    "PushoverConfig",
    "PushoverCredentialsError",
    "PushoverProvider",
    "create_provider",
    "credential_values",
]
