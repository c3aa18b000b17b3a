from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    SecretStr,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import TomlConfigSettingsSource

from .config import ConfigError, check_config_file, resolve_config_path
from .manager import check_prefix


class DiscordTransportSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    bot_token: SecretStr | None = None
    guild_id: PositiveInt | None = None

    @field_validator("bot_token", mode="before")
    @classmethod
    def _blank_token_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value


class TransportsSettings(BaseModel):
    discord: DiscordTransportSettings = Field(default_factory=DiscordTransportSettings)

    model_config = ConfigDict(extra="allow")


class PluginsSettings(BaseModel):
    enabled: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")


class CmdrouteSettings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="allow",
        env_prefix="CMDROUTE__",
        env_nested_delimiter="__",
    )

    prefix: str = "!"
    handlers: list[str] = Field(default_factory=list)
    transports: TransportsSettings = Field(default_factory=TransportsSettings)
    plugins: PluginsSettings = Field(default_factory=PluginsSettings)

    @field_validator("prefix", mode="before")
    @classmethod
    def _validate_prefix(cls, value: Any) -> Any:
        return check_prefix(value)

    @field_validator("handlers", mode="before")
    @classmethod
    def _validate_handlers(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("handlers must be a list of `module:attribute` strings")
        cleaned: list[str] = []
        for item in value:
            if not isinstance(item, str) or ":" not in item:
                raise ValueError(
                    f"invalid handler {item!r}; expected `module:attribute`"
                )
            cleaned.append(item.strip())
        return cleaned

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Config file values arrive as init kwargs; CMDROUTE__* wins over them.
        return env_settings, init_settings

    def plugins_allowlist(self) -> list[str] | None:
        enabled = [value.strip() for value in self.plugins.enabled if value.strip()]
        return enabled or None


def load_settings(path: str | Path | None = None) -> tuple[CmdrouteSettings, Path]:
    cfg_path = resolve_config_path(path)
    check_config_file(cfg_path)
    return _load_settings_from_path(cfg_path), cfg_path


def load_settings_if_exists(
    path: str | Path | None = None,
) -> tuple[CmdrouteSettings, Path] | None:
    cfg_path = resolve_config_path(path)
    if not check_config_file(cfg_path, required=False):
        return None
    return _load_settings_from_path(cfg_path), cfg_path


def require_discord(
    settings: CmdrouteSettings, config_path: Path
) -> tuple[str, int | None]:
    discord_cfg = settings.transports.discord
    if discord_cfg.bot_token is None:
        raise ConfigError(f"Missing discord bot token in {config_path}.")
    return discord_cfg.bot_token.get_secret_value(), discord_cfg.guild_id


def _load_settings_from_path(cfg_path: Path) -> CmdrouteSettings:
    try:
        file_values = TomlConfigSettingsSource(CmdrouteSettings, toml_file=cfg_path)()
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Malformed TOML in {cfg_path}: {exc}") from None
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {cfg_path}: {exc}") from exc
    try:
        return CmdrouteSettings(**file_values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {cfg_path}: {exc}") from exc
