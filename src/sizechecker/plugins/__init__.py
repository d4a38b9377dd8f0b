"""Notifier plugins and their selection from configuration.

Each plugin package holds one provider's configuration schema, API client
and Notifier implementation. build_notifiers is the only place that knows
which command-line destination maps to which plugin; the dispatch core only
sees the Notifier Protocol.
"""

from collections.abc import Mapping

from pydantic import ValidationError

from sizechecker.config import CheckerConfig, ConfigurationError, format_validation_error
from sizechecker.plugins import discord, pushover
from sizechecker.types import HTTPClient, Notifier

__all__ = ["build_notifiers", "notifier_secrets"]


def notifier_secrets(
    config: CheckerConfig,
    *,
    environ: Mapping[str, str] | None = None,
) -> tuple[str, ...]:
    """Collect credential values the configured notifiers will send.

    Webhook URLs are redacted by shape and need no entry here; push
    credentials are opaque strings and must be listed explicitly.
    """
    if config.pushover_destination is None:
        return ()
    return pushover.credential_values(environ)


def build_notifiers(
    config: CheckerConfig,
    http_client: HTTPClient,
    *,
    environ: Mapping[str, str] | None = None,
) -> list[Notifier]:
    """Create one notifier per configured destination.

    The chat webhook comes first, then the push service, which is also the
    order in which they are notified.

    Args:
        config: Validated check configuration
        http_client: Shared HTTP client injected into every provider
        environ: Environment for push credentials, ``None`` for ``os.environ``

    Returns:
        Zero, one or two notifiers

    Raises:
        ConfigurationError: If a destination is malformed
    """
    notifiers: list[Notifier] = []

    if config.discord_webhook is not None:
        try:
            discord_config = discord.DiscordConfig(webhook_url=config.discord_webhook)
        except ValidationError as e:
            raise ConfigurationError(format_validation_error(e, heading="Invalid --discord value:")) from e
        notifiers.append(discord.create_provider(config=discord_config, http_client=http_client))

    if config.pushover_destination is not None:
        notifiers.append(
            pushover.create_provider(
                target=config.pushover_destination,
                http_client=http_client,
                environ=environ,
            )
        )

    return notifiers
