"""Expose a Pycord message to the command manager."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import discord

from ..context import MessageContext
from ..resolvers import ResolverRegistry


@dataclass(frozen=True, slots=True)
class DiscordMessageContext:
    message: discord.Message
    bot: discord.Client | None = None

    @property
    def client(self) -> discord.Client:
        """The explicit ``bot``, else the client that received ``message``."""
        if self.bot is not None:
            return self.bot
        return self.message._state._get_client()

    @property
    def content(self) -> str:
        return self.message.content

    @property
    def author(self) -> discord.User | discord.Member:
        return self.message.author

    @property
    def member(self) -> discord.Member | None:
        author = self.message.author
        return author if isinstance(author, discord.Member) else None

    @property
    def channel(self) -> Any:
        return self.message.channel

    @property
    def guild(self) -> discord.Guild | None:
        return self.message.guild


def _message(ctx: MessageContext) -> discord.Message:
    if not isinstance(ctx, DiscordMessageContext):
        raise TypeError(f"{type(ctx).__name__} does not carry a discord.Message")
    return ctx.message


def _text_channel(ctx: MessageContext) -> discord.TextChannel | None:
    channel = ctx.channel
    return channel if isinstance(channel, discord.TextChannel) else None


def register_discord_resolvers(registry: ResolverRegistry) -> ResolverRegistry:
    """Let handlers annotate parameters with Pycord types directly."""
    registry.register(discord.Message, _message)
    registry.register(discord.User, lambda ctx: ctx.author)
    registry.register(discord.Member, lambda ctx: ctx.member)
    registry.register(discord.TextChannel, _text_channel)
    registry.register(discord.Guild, lambda ctx: ctx.guild)
    registry.register(discord.Client, lambda ctx: ctx.client)
    registry.register(discord.Bot, lambda ctx: ctx.client)
    return registry
