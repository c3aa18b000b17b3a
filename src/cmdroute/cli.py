from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import anyio
import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import ConfigError
from .discord.client import DiscordCommandBot
from .errors import CommandError, type_name
from .logging import get_logger, setup_logging
from .manager import CommandManager
from .runtime import build_manager
from .settings import CmdrouteSettings, load_settings, require_discord

logger = get_logger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _fail(exc: Exception) -> NoReturn:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=1) from exc


def _load(config: Path | None) -> tuple[CmdrouteSettings, Path, CommandManager]:
    try:
        settings, config_path = load_settings(config)
        manager = build_manager(settings)
    except (ConfigError, CommandError) as exc:
        _fail(exc)
    return settings, config_path, manager


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Route prefixed chat messages to registered command handlers.",
)


@app.callback()
def app_main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """cmdroute CLI."""


@app.command()
def run(
    config: Path | None = typer.Option(
        None, "--config", help="Path to cmdroute.toml."
    ),
    debug: bool = typer.Option(
        False, "--debug/--no-debug", help="Log lookups that do not match."
    ),
) -> None:
    """Connect to Discord and dispatch commands."""
    setup_logging(debug=debug)
    settings, config_path, manager = _load(config)
    try:
        token, guild_id = require_discord(settings, config_path)
    except ConfigError as exc:
        _fail(exc)
    logger.info(
        "cmdroute.start",
        prefix=manager.prefix,
        commands=sorted(command.name for command in manager.commands),
    )
    bot = DiscordCommandBot(token, manager, guild_id=guild_id)
    anyio.run(bot.run)


@app.command("commands")
def list_commands(
    config: Path | None = typer.Option(
        None, "--config", help="Path to cmdroute.toml."
    ),
) -> None:
    """List the registered commands."""
    setup_logging(debug=False, cache_logger_on_first_use=False)
    _, _, manager = _load(config)
    table = Table(title=f"commands (prefix {manager.prefix!r})")
    table.add_column("name")
    table.add_column("aliases")
    table.add_column("parameters")
    for command in sorted(manager.commands, key=lambda item: item.key):
        table.add_row(
            command.name,
            ", ".join(command.aliases),
            ", ".join(type_name(param) for param in command.params),
        )
    Console().print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
