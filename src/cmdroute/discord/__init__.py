"""Discord transport adapter for the command manager."""

from .client import DiscordCommandBot
from .context import DiscordMessageContext, register_discord_resolvers

__all__ = [
    "DiscordCommandBot",
    "DiscordMessageContext",
    "register_discord_resolvers",
]
