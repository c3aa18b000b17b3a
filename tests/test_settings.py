from pathlib import Path

import pytest

from cmdroute.config import ConfigError
from cmdroute.settings import load_settings, load_settings_if_exists, require_discord


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_settings_reads_toml(tmp_path: Path) -> None:
    config_path = _write(
        tmp_path / "cmdroute.toml",
        'prefix = "?"\n'
        'handlers = ["tests.fakes:PingHandler"]\n'
        "\n"
        "[plugins]\n"
        'enabled = ["echo"]\n'
        "\n"
        "[transports.discord]\n"
        'bot_token = "secret"\n'
        "guild_id = 42\n",
    )

    settings, path = load_settings(config_path)

    assert path == config_path
    assert settings.prefix == "?"
    assert settings.handlers == ["tests.fakes:PingHandler"]
    assert settings.plugins_allowlist() == ["echo"]
    assert require_discord(settings, path) == ("secret", 42)


def test_defaults(tmp_path: Path) -> None:
    settings, _ = load_settings(_write(tmp_path / "cmdroute.toml", ""))

    assert settings.prefix == "!"
    assert settings.handlers == []
    assert settings.plugins_allowlist() is None


def test_environment_overrides_file(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("CMDROUTE__PREFIX", "$")
    settings, _ = load_settings(_write(tmp_path / "cmdroute.toml", 'prefix = "?"\n'))

    assert settings.prefix == "$"


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Missing config file"):
        load_settings(tmp_path / "nope.toml")
    assert load_settings_if_exists(tmp_path / "nope.toml") is None


def test_directory_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="is not a file"):
        load_settings_if_exists(tmp_path)


def test_malformed_toml(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Malformed TOML"):
        load_settings(_write(tmp_path / "cmdroute.toml", "prefix = \n"))


@pytest.mark.parametrize(
    "text",
    [
        'prefix = ""\n',
        "prefix = 3\n",
        'prefix = "! "\n',
        "[transports.discord]\nguild_id = -5\n",
        'handlers = ["no-colon"]\n',
        "[transports.discord]\nguild_id = \"abc\"\n",
        "[transports.discord]\nunknown = 1\n",
    ],
)
def test_invalid_values(tmp_path: Path, text: str) -> None:
    with pytest.raises(ConfigError, match="Invalid config"):
        load_settings(_write(tmp_path / "cmdroute.toml", text))


def test_require_discord_needs_token(tmp_path: Path) -> None:
    settings, path = load_settings(_write(tmp_path / "cmdroute.toml", ""))

    with pytest.raises(ConfigError, match="Missing discord bot token"):
        require_discord(settings, path)


def test_blank_token_counts_as_missing(tmp_path: Path) -> None:
    settings, path = load_settings(
        _write(tmp_path / "cmdroute.toml", '[transports.discord]\nbot_token = "  "\n')
    )

    assert settings.transports.discord.bot_token is None
    with pytest.raises(ConfigError, match="Missing discord bot token"):
        require_discord(settings, path)


def test_environment_fills_nested_values(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("CMDROUTE__TRANSPORTS__DISCORD__GUILD_ID", "42")
    settings, path = load_settings(
        _write(tmp_path / "cmdroute.toml", '[transports.discord]\nbot_token = " abc "\n')
    )

    assert require_discord(settings, path) == ("abc", 42)
