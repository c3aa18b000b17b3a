"""Command registration facade and message dispatcher."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from .commands import Command, build_commands, check_arguments
from .context import MessageContext
from .errors import HandlerExecutionFailure, PreconditionViolation
from .logging import get_logger
from .resolvers import RawArgs, ResolverRegistry, default_resolvers
from .table import CommandTable

logger = get_logger(__name__)

class DispatchStatus(StrEnum):
    NOT_FOUND = "not_found"
    OK = "ok"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class DispatchResult:
    status: DispatchStatus
    command: Command | None = None
    error: HandlerExecutionFailure | None = None

    @property
    def handled(self) -> bool:
        return self.status is not DispatchStatus.NOT_FOUND


_UNMATCHED = DispatchResult(status=DispatchStatus.NOT_FOUND)


def split_command(text: str, prefix: str) -> tuple[str, list[str]] | None:
    """Split ``text`` into a lower-cased command key and its raw arguments.

    Tokens are separated by single spaces, so ``"!echo  a"`` yields
    ``("echo", ["", "a"])``. Trailing empty tokens are dropped.
    """
    if not text.startswith(prefix):
        return None
    content = text[len(prefix) :]
    if not content:
        return None
    tokens = content.split(" ")
    while tokens and not tokens[-1]:
        tokens.pop()
    if not tokens or not tokens[0]:
        return None
    return tokens[0].lower(), tokens[1:]


class CommandManager:
    def __init__(
        self,
        prefix: str,
        *,
        resolvers: ResolverRegistry | None = None,
    ) -> None:
        self._prefix = check_prefix(prefix)
        self._resolvers = resolvers if resolvers is not None else default_resolvers()
        self._table = CommandTable()

    @property
    def prefix(self) -> str:
        return self._prefix

    @prefix.setter
    def prefix(self, value: str) -> None:
        self._prefix = check_prefix(value)

    @property
    def resolvers(self) -> ResolverRegistry:
        return self._resolvers

    @property
    def commands(self) -> tuple[Command, ...]:
        return self._table.commands()

    def get_command(self, name: str) -> Command | None:
        return self._table.lookup(name)

    def register_all(self, *handlers: Any) -> list[Command]:
        """Validate every handler, then register all of their commands."""
        built: list[Command] = []
        for handler in handlers:
            built.extend(self._build(handler))
        self._table.register_many(built)
        for command in built:
            logger.info(
                "command.registered",
                command=command.name,
                aliases=list(command.aliases),
            )
        return built

    def register(self, handler: Any) -> list[Command]:
        return self.register_all(handler)

    def unregister(self, target: str | Command) -> None:
        if isinstance(target, str):
            removed = self._table.unregister(target)
            if removed is None:
                return
            name = removed.name
        else:
            if target is None:
                raise PreconditionViolation("command must not be None")
            self._table.unregister_command(target)
            name = target.name
        logger.info("command.unregistered", command=name)

    async def execute_command(self, context: MessageContext) -> bool:
        """Dispatch ``context`` and report whether a command matched.

        A handler that raises still counts as handled; the failure is only
        logged. Use ``dispatch`` to tell the two apart.
        """
        result = await self.dispatch(context)
        return result.handled

    async def dispatch(self, context: MessageContext) -> DispatchResult:
        if context is None:
            raise PreconditionViolation("message must not be None")

        text = context.content
        parsed = split_command(text, self._prefix)
        if parsed is None:
            return _UNMATCHED
        key, args = parsed

        command = self._table.snapshot.lookup(key)
        if command is None:
            logger.debug("message.skipped", reason="unknown command", command=key)
            return _UNMATCHED

        logger.info(
            "command.executed",
            command=command.name,
            author=str(context.author),
            text=text,
        )
        try:
            params = [self._resolve(arg_type, context, args) for arg_type in command.params]
            result = command.handler(*params)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            failure = HandlerExecutionFailure(command, exc)
            failure.__cause__ = exc
            logger.exception(
                "command.failed",
                command=command.name,
                text=text,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            return DispatchResult(
                status=DispatchStatus.FAILED, command=command, error=failure
            )
        return DispatchResult(status=DispatchStatus.OK, command=command)

    def _build(self, handler: Any) -> list[Command]:
        if handler is None:
            raise PreconditionViolation("handler must not be None")
        if isinstance(handler, Command):
            check_arguments(handler, self._resolvers)
            return [handler]
        return build_commands(handler, self._resolvers)

    def _resolve(self, arg_type: Any, context: MessageContext, args: list[str]) -> Any:
        if arg_type is RawArgs:
            return list(args)
        return self._resolvers.resolve(arg_type, context)


def check_prefix(value: Any) -> str:
    if not isinstance(value, str) or not value or value != value.strip():
        raise PreconditionViolation(
            "command prefix must be a non-empty string without surrounding "
            f"whitespace, got {value!r}"
        )
    return value
