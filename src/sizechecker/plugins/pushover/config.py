"""Pushover provider configuration schema.

Pushover credentials come from the environment rather than the command
line, so they never show up in process listings or crontab files.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Annotated, Final

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

API_TOKEN_ENV: Final[str] = "PUSHOVER_APITOKEN"
USER_KEY_ENV: Final[str] = "PUSHOVER_USERKEY"
DEFAULT_API_URL: Final[str] = "https://api.pushover.net/1/messages.json"


class PushoverCredentialsError(RuntimeError):
    """Raised when the Pushover credential environment variables are missing."""

    def __init__(self, missing: tuple[str, ...]) -> None:
        names = ", ".join(missing)
        super().__init__(f"Pushover credentials missing: set {names}")
        self.missing: tuple[str, ...] = missing


class PushoverConfig(BaseModel):
    """Pydantic schema for Pushover delivery configuration."""

    model_config = ConfigDict(frozen=True)

    api_token: Annotated[
        SecretStr,
        Field(description="Application API token issued by Pushover"),
    ]
    user_key: Annotated[
        SecretStr,
        Field(description="User or group key that receives the message"),
    ]
    destination: Annotated[
        str,
        Field(
            description="Operator-supplied destination label, sent as the message title",
            min_length=1,
            max_length=250,
        ),
    ]
    api_url: Annotated[
        str,
        Field(description="Pushover messages endpoint"),
    ] = DEFAULT_API_URL

    @field_validator("api_token", "user_key")
    @classmethod
    def validate_credential(cls, value: SecretStr) -> SecretStr:
        """Reject blank credentials."""
        if not value.get_secret_value().strip():
            msg = "Credential cannot be empty"
            raise ValueError(msg)
        return SecretStr(value.get_secret_value().strip())

    @classmethod
    def from_environment(
        cls,
        destination: str,
        environ: Mapping[str, str] | None = None,
        *,
        api_url: str = DEFAULT_API_URL,
    ) -> PushoverConfig:
        """Build a configuration from ``PUSHOVER_APITOKEN`` and ``PUSHOVER_USERKEY``.

        Args:
            destination: The ``-o`` value given on the command line
            environ: Environment mapping, defaults to ``os.environ``
            api_url: Messages endpoint

        Raises:
            PushoverCredentialsError: If either variable is unset or empty
        """
        env = os.environ if environ is None else environ
        token = env.get(API_TOKEN_ENV, "").strip()
        user = env.get(USER_KEY_ENV, "").strip()

        missing = tuple(name for name, value in ((API_TOKEN_ENV, token), (USER_KEY_ENV, user)) if not value)
        if missing:
            raise PushoverCredentialsError(missing)

        return cls(
            api_token=SecretStr(token),
            user_key=SecretStr(user),
            destination=destination,
            api_url=api_url,
        )


def credential_values(environ: Mapping[str, str] | None = None) -> tuple[str, ...]:
    """Return the non-empty Pushover credentials present in the environment.

    Used to seed log redaction before any notifier runs; unlike
    from_environment this never fails on missing variables.
    """
    env = os.environ if environ is None else environ
    values = (env.get(API_TOKEN_ENV, "").strip(), env.get(USER_KEY_ENV, "").strip())
    return tuple(value for value in values if value)
