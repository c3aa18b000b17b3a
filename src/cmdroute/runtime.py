from __future__ import annotations

from typing import Any

from .discord.context import register_discord_resolvers
from .manager import CommandManager
from .plugins import load_handler_spec, load_handlers
from .resolvers import default_resolvers
from .settings import CmdrouteSettings


def collect_handlers(settings: CmdrouteSettings) -> list[Any]:
    handlers = [load_handler_spec(spec) for spec in settings.handlers]
    handlers.extend(load_handlers(settings.plugins_allowlist()))
    return handlers


def build_manager(settings: CmdrouteSettings) -> CommandManager:
    """Create a manager with Discord resolvers and every configured handler."""
    resolvers = register_discord_resolvers(default_resolvers())
    manager = CommandManager(settings.prefix, resolvers=resolvers)
    handlers = collect_handlers(settings)
    if handlers:
        manager.register_all(*handlers)
    return manager
