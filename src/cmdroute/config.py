"""Where the cmdroute config file lives and how its problems are reported."""

from __future__ import annotations

from pathlib import Path

from .errors import CommandError

HOME_CONFIG_PATH = Path.home() / ".cmdroute" / "cmdroute.toml"


class ConfigError(CommandError):
    """The config file, a configured handler or a plugin is unusable."""


def resolve_config_path(path: str | Path | None) -> Path:
    return Path(path).expanduser() if path else HOME_CONFIG_PATH


def check_config_file(cfg_path: Path, *, required: bool = True) -> bool:
    """Return whether ``cfg_path`` is a readable config file.

    A missing file is an error only when ``required``; a path that exists
    but is not a regular file always is.
    """
    if not cfg_path.exists():
        if required:
            raise ConfigError(f"Missing config file {cfg_path}.")
        return False
    if not cfg_path.is_file():
        raise ConfigError(f"Config path {cfg_path} exists but is not a file.")
    return True
