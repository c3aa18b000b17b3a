from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import IO, Any, TextIO

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

LOG_FORMAT_ENV = "CMDROUTE_LOG_FORMAT"
LOG_FILE_ENV = "CMDROUTE_LOG_FILE"


class _TeeRenderer:
    """Render to the console and append JSON lines to an open file."""

    def __init__(self, console: Processor, handle: IO[str]) -> None:
        self._console = console
        self._json = structlog.processors.JSONRenderer()
        self._handle = handle

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> str:
        self._handle.write(self._json(logger, method_name, dict(event_dict)) + "\n")
        return self._console(logger, method_name, event_dict)


_log_file: IO[str] | None = None


def _open_log_file(path: str | None) -> IO[str] | None:
    global _log_file
    if _log_file is not None:
        _log_file.close()
        _log_file = None
    if path:
        # Line buffered so each event is on disk once logged.
        _log_file = Path(path).expanduser().open("a", encoding="utf-8", buffering=1)
    return _log_file


def _renderer(fmt: str, *, stream: TextIO) -> Processor:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    colors = hasattr(stream, "isatty") and stream.isatty()
    return structlog.dev.ConsoleRenderer(colors=colors)


def setup_logging(
    *,
    debug: bool = False,
    cache_logger_on_first_use: bool = True,
    stream: TextIO | None = None,
) -> None:
    stream = stream or sys.stderr
    level = logging.DEBUG if debug else logging.INFO
    fmt = os.environ.get(LOG_FORMAT_ENV, "console").strip().lower()

    renderer = _renderer(fmt, stream=stream)
    log_file = _open_log_file(os.environ.get(LOG_FILE_ENV))
    if log_file is not None:
        renderer = _TeeRenderer(renderer, log_file)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if fmt == "json" or log_file is not None:
        processors.append(structlog.processors.format_exc_info)
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=cache_logger_on_first_use,
    )


def get_logger(name: str | None = None) -> Any:
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name)


def bind_run_context(**fields: Any) -> None:
    structlog.contextvars.bind_contextvars(**fields)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
