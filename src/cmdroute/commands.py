"""Command declarations and descriptor construction.

Handlers declare commands with decorators instead of being scanned for
arbitrary metadata:

    @command("ping", aliases=("p",))
    class Ping:
        @executor
        async def run(self, channel: Channel) -> None: ...

    class Admin:
        @command("kick")
        async def kick(self, author: Author, args: RawArgs) -> None: ...

        @command("ban", aliases=("b",))
        async def ban(self, author: Author, args: RawArgs) -> None: ...

Callables that are not declared this way can be wrapped directly with
``Command.build``.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Hashable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, TypeVar, get_type_hints

from .errors import InvalidCommandDeclaration, UnsupportedArgumentType, type_name
from .resolvers import ResolverRegistry

T = TypeVar("T")

_COMMAND_ATTR = "__cmdroute_command__"
_EXECUTOR_ATTR = "__cmdroute_executor__"


@dataclass(frozen=True, slots=True)
class CommandSpec:
    name: str
    aliases: tuple[str, ...] = ()
    params: tuple[Hashable, ...] | None = None


@dataclass(frozen=True, slots=True)
class Command:
    name: str
    aliases: tuple[str, ...]
    handler: Callable[..., Any]
    params: tuple[Hashable, ...] = ()

    @property
    def key(self) -> str:
        return self.name.lower()

    @property
    def alias_keys(self) -> tuple[str, ...]:
        return tuple(alias.lower() for alias in self.aliases)

    @classmethod
    def build(
        cls,
        name: str,
        handler: Callable[..., Any],
        *,
        aliases: Iterable[str] = (),
        params: Iterable[Hashable] | None = None,
        resolvers: ResolverRegistry | None = None,
    ) -> Command:
        name = _check_name(name)
        alias_tuple = tuple(_check_name(alias, kind="alias") for alias in aliases)
        if not callable(handler):
            raise InvalidCommandDeclaration(
                f"Handler for command {name!r} is not callable"
            )
        param_types = (
            tuple(params) if params is not None else signature_params(handler, name)
        )
        built = cls(name=name, aliases=alias_tuple, handler=handler, params=param_types)
        if resolvers is not None:
            check_arguments(built, resolvers)
        return built


def command(
    name: str,
    *,
    aliases: Iterable[str] = (),
    params: Iterable[Hashable] | None = None,
) -> Callable[[T], T]:
    """Declare a command on a handler class or on a single method."""
    spec = CommandSpec(
        name=name,
        aliases=tuple(aliases),
        params=tuple(params) if params is not None else None,
    )

    def decorator(target: T) -> T:
        setattr(target, _COMMAND_ATTR, spec)
        return target

    return decorator


def executor(func: T) -> T:
    """Mark the entry point of a class-level ``@command`` declaration."""
    setattr(func, _EXECUTOR_ATTR, True)
    return func


def declared_spec(target: Any) -> CommandSpec | None:
    spec = getattr(target, _COMMAND_ATTR, None)
    return spec if isinstance(spec, CommandSpec) else None


def signature_params(handler: Callable[..., Any], name: str) -> tuple[Hashable, ...]:
    target = handler
    if not (inspect.isfunction(handler) or inspect.ismethod(handler)):
        target = handler.__call__  # type: ignore[operator]
    try:
        hints = get_type_hints(target)
    except (NameError, TypeError) as exc:
        raise InvalidCommandDeclaration(
            f"Cannot read parameter types of command {name!r}: {exc}"
        ) from exc
    params: list[Hashable] = []
    for param in inspect.signature(target).parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            raise InvalidCommandDeclaration(
                f"Command {name!r} cannot take *{param.name} or **{param.name}"
            )
        if param.kind is param.KEYWORD_ONLY and param.default is param.empty:
            raise InvalidCommandDeclaration(
                f"Command {name!r} has required keyword-only parameter {param.name!r}"
            )
        if param.kind is param.KEYWORD_ONLY:
            continue
        hint = hints.get(param.name)
        if hint is None:
            raise InvalidCommandDeclaration(
                f"Parameter {param.name!r} of command {name!r} has no type annotation"
            )
        params.append(hint)
    return tuple(params)


def check_arguments(cmd: Command, resolvers: ResolverRegistry) -> None:
    for arg_type in cmd.params:
        if not resolvers.supports(arg_type):
            raise UnsupportedArgumentType(arg_type, command=cmd.name)


def build_commands(handler: Any, resolvers: ResolverRegistry) -> list[Command]:
    """Build and validate every command declared by ``handler``.

    Nothing is registered here; an invalid declaration raises before the
    caller inserts any of the returned commands.
    """
    if inspect.isfunction(handler) or inspect.ismethod(handler):
        spec = declared_spec(handler)
        if spec is None:
            raise InvalidCommandDeclaration(
                f"{type_name(handler)} is not declared with @command"
            )
        return [_from_spec(spec, handler, resolvers)]

    if isinstance(handler, type):
        raise InvalidCommandDeclaration(
            f"{type_name(handler)} is a class; register an instance of it"
        )

    cls = type(handler)
    class_spec = declared_spec(cls)
    if class_spec is not None:
        entry_points = [
            attr for attr, member in _declared_members(cls) if _is_executor(member)
        ]
        if not entry_points:
            raise InvalidCommandDeclaration(
                f"No executor found for command {class_spec.name}"
            )
        if len(entry_points) > 1:
            raise InvalidCommandDeclaration(
                f"More than one executor found for command {class_spec.name}"
            )
        return [_from_spec(class_spec, getattr(handler, entry_points[0]), resolvers)]

    commands: list[Command] = []
    for attr, member in _declared_members(cls):
        if _is_executor(member):
            raise InvalidCommandDeclaration(
                f"{type_name(cls)}.{attr} is marked @executor but "
                f"{type_name(cls)} has no class-level @command"
            )
        spec = declared_spec(_unwrap(member))
        if spec is not None:
            commands.append(_from_spec(spec, getattr(handler, attr), resolvers))
    if not commands:
        raise InvalidCommandDeclaration(f"No command declared on {type_name(cls)}")
    return commands


def _from_spec(
    spec: CommandSpec, handler: Callable[..., Any], resolvers: ResolverRegistry
) -> Command:
    return Command.build(
        spec.name,
        handler,
        aliases=spec.aliases,
        params=spec.params,
        resolvers=resolvers,
    )


def _declared_members(cls: type) -> Iterator[tuple[str, Any]]:
    members: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for attr, value in vars(klass).items():
            members[attr] = value
    for attr, value in members.items():
        if inspect.isfunction(_unwrap(value)):
            yield attr, value


def _unwrap(member: Any) -> Any:
    if isinstance(member, (staticmethod, classmethod)):
        return member.__func__
    return member


def _is_executor(member: Any) -> bool:
    return getattr(_unwrap(member), _EXECUTOR_ATTR, False) is True


def _check_name(value: Any, *, kind: str = "name") -> str:
    if not isinstance(value, str) or not value or value != value.strip():
        raise InvalidCommandDeclaration(
            f"Invalid command {kind} {value!r}; expected a non-empty string"
        )
    if any(char.isspace() for char in value):
        raise InvalidCommandDeclaration(
            f"Invalid command {kind} {value!r}; whitespace is not allowed"
        )
    return value
