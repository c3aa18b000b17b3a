"""Discovery of handler objects published by installed distributions."""

from __future__ import annotations

import importlib
from collections.abc import Iterable
from importlib.metadata import EntryPoint, entry_points
from typing import Any

from .config import ConfigError
from .logging import get_logger

logger = get_logger(__name__)

HANDLER_GROUP = "cmdroute.handlers"


def _select(group: str) -> list[EntryPoint]:
    return list(entry_points().select(group=group))


def _allowed(name: str, allowlist: Iterable[str] | None) -> bool:
    if allowlist is None:
        return True
    return name.lower() in {item.lower() for item in allowlist}


def list_handler_ids(allowlist: Iterable[str] | None = None) -> list[str]:
    allowlist = list(allowlist) if allowlist is not None else None
    return sorted(ep.name for ep in _select(HANDLER_GROUP) if _allowed(ep.name, allowlist))


def _instantiate(name: str, value: Any) -> Any:
    if isinstance(value, type):
        try:
            return value()
        except Exception as exc:
            raise ConfigError(f"Failed to create handler {name!r}: {exc}") from exc
    return value


def load_handlers(allowlist: Iterable[str] | None = None) -> list[Any]:
    allowlist = list(allowlist) if allowlist is not None else None
    handlers: list[Any] = []
    for ep in sorted(_select(HANDLER_GROUP), key=lambda item: item.name):
        if not _allowed(ep.name, allowlist):
            continue
        try:
            loaded = ep.load()
        except Exception as exc:
            raise ConfigError(f"Failed to load handler plugin {ep.name!r}: {exc}") from exc
        handlers.append(_instantiate(ep.name, loaded))
        dist = getattr(ep, "dist", None)
        logger.info(
            "plugin.loaded",
            plugin=ep.name,
            distribution=dist.name if dist is not None else None,
        )
    return handlers


def load_handler_spec(spec: str) -> Any:
    """Load ``package.module:attribute`` and instantiate it if it is a class."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name.strip() or not attr.strip():
        raise ConfigError(f"Invalid handler {spec!r}; expected `module:attribute`.")
    try:
        module = importlib.import_module(module_name.strip())
    except ImportError as exc:
        raise ConfigError(f"Cannot import handler module {module_name!r}: {exc}") from exc
    target: Any = module
    for part in attr.strip().split("."):
        try:
            target = getattr(target, part)
        except AttributeError:
            raise ConfigError(f"Handler {spec!r} not found.") from None
    return _instantiate(spec, target)
