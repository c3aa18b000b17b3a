"""What the dispatcher reads from an inbound chat message."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MessageContext(Protocol):
    @property
    def content(self) -> str: ...

    @property
    def author(self) -> Any: ...

    @property
    def member(self) -> Any | None: ...

    @property
    def channel(self) -> Any: ...

    @property
    def guild(self) -> Any | None: ...

    @property
    def client(self) -> Any: ...
