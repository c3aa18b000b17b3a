"""Error taxonomy for command registration and dispatch."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .commands import Command


class CommandError(RuntimeError):
    pass


class PreconditionViolation(CommandError, ValueError):
    """A public operation received a missing or invalid argument."""


class InvalidCommandDeclaration(CommandError):
    """A declared command has zero or several entry points, or a bad name."""


class UnsupportedArgumentType(CommandError):
    """A handler parameter type has no registered resolver."""

    def __init__(self, arg_type: Any, *, command: str | None = None) -> None:
        self.arg_type = arg_type
        self.command = command
        label = type_name(arg_type)
        if command is None:
            message = f"{label} is not a valid argument type"
        else:
            message = f"{label} is not a valid argument type (command {command!r})"
        super().__init__(message)


class HandlerExecutionFailure(CommandError):
    """Raised inside a handler while a command was being dispatched."""

    def __init__(self, command: Command, error: BaseException) -> None:
        self.command = command
        self.error = error
        super().__init__(
            f"Error while dispatching command {command.name}: "
            f"{error.__class__.__name__}: {error}"
        )


def type_name(value: Any) -> str:
    name = getattr(value, "__qualname__", None) or getattr(value, "__name__", None)
    if isinstance(name, str):
        return name
    return repr(value)
