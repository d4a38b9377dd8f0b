"""Discord webhook notifier plugin."""

from sizechecker.plugins.discord.client import DiscordAPIClient, DiscordAPIError, DiscordRateLimitError
from sizechecker.plugins.discord.config import DiscordConfig
from sizechecker.plugins.discord.provider import DiscordProvider, create_provider

__all__ = [
    "DiscordAPIClient",
    "DiscordAPIError",
    "DiscordConfig",
    "DiscordProvider",
    "DiscordRateLimitError",
    "create_provider",
]
