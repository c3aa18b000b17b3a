"""Argument resolvers: derive handler arguments from a message context."""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Any, NewType, TypeAlias

from .context import MessageContext
from .errors import UnsupportedArgumentType

Extractor: TypeAlias = Callable[[MessageContext], Any]

Author = NewType("Author", object)
Member = NewType("Member", object)
Channel = NewType("Channel", object)
Guild = NewType("Guild", object)
Client = NewType("Client", object)

# Filled by the dispatcher with the tokens following the command name.
RawArgs = NewType("RawArgs", list)


class ResolverRegistry:
    def __init__(self, extractors: dict[Hashable, Extractor] | None = None) -> None:
        self._extractors: dict[Hashable, Extractor] = dict(extractors or {})

    def register(self, arg_type: Hashable, extractor: Extractor) -> None:
        self._extractors[arg_type] = extractor

    def supports(self, arg_type: Hashable) -> bool:
        return arg_type is RawArgs or arg_type in self._extractors

    def __contains__(self, arg_type: object) -> bool:
        return arg_type in self._extractors

    def resolve(self, arg_type: Hashable, context: MessageContext) -> Any:
        try:
            extractor = self._extractors[arg_type]
        except KeyError:
            raise UnsupportedArgumentType(arg_type) from None
        return extractor(context)

    def copy(self) -> ResolverRegistry:
        return ResolverRegistry(self._extractors)

    def types(self) -> tuple[Hashable, ...]:
        return tuple(self._extractors)


def default_resolvers() -> ResolverRegistry:
    registry = ResolverRegistry()
    registry.register(MessageContext, lambda ctx: ctx)
    registry.register(Author, lambda ctx: ctx.author)
    registry.register(Member, lambda ctx: ctx.member)
    registry.register(Channel, lambda ctx: ctx.channel)
    registry.register(Guild, lambda ctx: ctx.guild)
    registry.register(Client, lambda ctx: ctx.client)
    return registry
