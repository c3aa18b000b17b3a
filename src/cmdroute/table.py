"""Name and alias lookup tables for registered commands."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .commands import Command
from .errors import PreconditionViolation

_EMPTY: Mapping[str, Command] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class TableSnapshot:
    by_name: Mapping[str, Command] = field(default_factory=lambda: _EMPTY)
    by_alias: Mapping[str, Command] = field(default_factory=lambda: _EMPTY)

    def lookup(self, key: str) -> Command | None:
        command = self.by_name.get(key)
        if command is None:
            command = self.by_alias.get(key)
        return command


class CommandTable:
    """Copy-on-write command table.

    Writers are serialized by a lock and publish a new snapshot; readers
    take ``snapshot`` once and never block.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = TableSnapshot()

    @property
    def snapshot(self) -> TableSnapshot:
        return self._snapshot

    def register(self, command: Command) -> None:
        self.register_many((command,))

    def register_many(self, commands: Iterable[Command]) -> None:
        with self._lock:
            by_name = dict(self._snapshot.by_name)
            by_alias = dict(self._snapshot.by_alias)
            for command in commands:
                by_name[command.key] = command
                for alias in command.alias_keys:
                    by_alias[alias] = command
            self._publish(by_name, by_alias)

    def unregister(self, name: str) -> Command | None:
        with self._lock:
            command = self._snapshot.by_name.get(name.lower())
            if command is None:
                return None
            self._remove(command)
            return command

    def unregister_command(self, command: Command) -> None:
        if not isinstance(command, Command):
            raise PreconditionViolation(f"command must be a Command, got {command!r}")
        with self._lock:
            self._remove(command)

    def lookup(self, key: str) -> Command | None:
        return self._snapshot.lookup(key.lower())

    def commands(self) -> tuple[Command, ...]:
        return tuple(self._snapshot.by_name.values())

    def _remove(self, command: Command) -> None:
        by_name = dict(self._snapshot.by_name)
        by_alias = dict(self._snapshot.by_alias)
        by_name.pop(command.key, None)
        # One removal per alias key, whichever command currently owns it.
        for alias in command.alias_keys:
            by_alias.pop(alias, None)
        self._publish(by_name, by_alias)

    def _publish(self, by_name: dict[str, Command], by_alias: dict[str, Command]) -> None:
        self._snapshot = TableSnapshot(
            by_name=MappingProxyType(by_name),
            by_alias=MappingProxyType(by_alias),
        )
