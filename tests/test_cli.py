from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from cmdroute import __version__, cli


def _config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "cmdroute.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_version() -> None:
    result = CliRunner().invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_commands_lists_registered_commands(handler_plugins, tmp_path: Path) -> None:
    handler_plugins()
    config_path = _config(
        tmp_path,
        'prefix = "?"\nhandlers = ["tests.fakes:PingHandler", "tests.fakes:EchoHandler"]\n',
    )

    result = CliRunner().invoke(cli.app, ["commands", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    assert "ping" in result.stdout
    assert "echo" in result.stdout
    assert "whoami" in result.stdout
    assert "RawArgs" in result.stdout


def test_commands_reports_missing_config(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli.app, ["commands", "--config", str(tmp_path / "missing.toml")]
    )

    assert result.exit_code == 1
    assert "error: Missing config file" in result.output


def test_commands_reports_bad_handler(handler_plugins, tmp_path: Path) -> None:
    handler_plugins()
    config_path = _config(tmp_path, 'handlers = ["tests.fakes:Recorder"]\n')

    result = CliRunner().invoke(cli.app, ["commands", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "No command declared on Recorder" in result.output


def test_run_requires_bot_token(handler_plugins, monkeypatch, tmp_path: Path) -> None:
    handler_plugins()
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    config_path = _config(tmp_path, "")

    result = CliRunner().invoke(cli.app, ["run", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "Missing discord bot token" in result.output


def test_run_starts_bot(handler_plugins, monkeypatch, tmp_path: Path) -> None:
    handler_plugins()
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    started: list[tuple[str, int | None, list[str]]] = []

    class FakeBot:
        def __init__(self, token, manager, *, guild_id=None) -> None:
            self.token = token
            self.manager = manager
            self.guild_id = guild_id

        async def run(self) -> None:
            started.append(
                (self.token, self.guild_id, [cmd.name for cmd in self.manager.commands])
            )

    monkeypatch.setattr(cli, "DiscordCommandBot", FakeBot)
    config_path = _config(
        tmp_path,
        'handlers = ["tests.fakes:PingHandler"]\n'
        "[transports.discord]\n"
        'bot_token = "token"\n'
        "guild_id = 5\n",
    )

    result = CliRunner().invoke(cli.app, ["run", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    assert started == [("token", 5, ["ping"])]
