"""Stable public API for cmdroute handlers and hosts."""

from __future__ import annotations

from .commands import Command, build_commands, command, executor
from .config import ConfigError
from .context import MessageContext
from .errors import (
    CommandError,
    HandlerExecutionFailure,
    InvalidCommandDeclaration,
    PreconditionViolation,
    UnsupportedArgumentType,
)
from .logging import get_logger, setup_logging
from .manager import CommandManager, DispatchResult, DispatchStatus
from .resolvers import (
    Author,
    Channel,
    Client,
    Guild,
    Member,
    RawArgs,
    ResolverRegistry,
    default_resolvers,
)

__all__ = [
    # Declarations
    "Command",
    "build_commands",
    "command",
    "executor",
    # Dispatch
    "CommandManager",
    "DispatchResult",
    "DispatchStatus",
    "MessageContext",
    # Argument types
    "Author",
    "Channel",
    "Client",
    "Guild",
    "Member",
    "RawArgs",
    "ResolverRegistry",
    "default_resolvers",
    # Errors
    "CommandError",
    "ConfigError",
    "HandlerExecutionFailure",
    "InvalidCommandDeclaration",
    "PreconditionViolation",
    "UnsupportedArgumentType",
    # Logging
    "get_logger",
    "setup_logging",
]
