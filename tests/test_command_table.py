import pytest

from cmdroute.commands import Command
from cmdroute.errors import PreconditionViolation
from cmdroute.table import CommandTable
from tests.fakes import Recorder


def _cmd(name: str, *aliases: str) -> Command:
    return Command.build(name, Recorder(), aliases=aliases, params=[])


def test_register_indexes_name_and_aliases_lower_cased() -> None:
    table = CommandTable()
    cmd = _cmd("Ping", "P", "pong")

    table.register(cmd)

    snapshot = table.snapshot
    assert snapshot.by_name == {"ping": cmd}
    assert snapshot.by_alias == {"p": cmd, "pong": cmd}
    assert table.lookup("PING") is cmd
    assert table.lookup("Pong") is cmd


def test_name_lookup_wins_over_alias() -> None:
    table = CommandTable()
    first = _cmd("first", "second")
    second = _cmd("second")
    table.register_many([first, second])

    assert table.lookup("second") is second


def test_alias_collision_is_last_write_wins() -> None:
    table = CommandTable()
    a = _cmd("a", "x")
    b = _cmd("b", "x")

    table.register(a)
    table.register(b)

    assert table.lookup("x") is b
    assert table.lookup("a") is a


def test_unregister_removes_name_and_aliases() -> None:
    table = CommandTable()
    a = _cmd("A", "y")
    table.register(a)

    removed = table.unregister("A")

    assert removed is a
    assert table.lookup("a") is None
    assert table.lookup("y") is None
    assert table.commands() == ()


def test_unregister_is_case_insensitive() -> None:
    table = CommandTable()
    table.register(_cmd("Ping"))

    assert table.unregister("ping") is not None
    assert table.lookup("ping") is None


def test_unregister_unknown_name_is_a_noop() -> None:
    table = CommandTable()
    b = _cmd("b", "z")
    table.register(b)

    assert table.unregister("missing") is None
    assert table.lookup("z") is b


def test_unregister_drops_shadowed_alias_key_once() -> None:
    table = CommandTable()
    a = _cmd("a", "x")
    b = _cmd("b", "x")
    table.register_many([a, b])

    table.unregister("a")

    # "x" belonged to b at removal time; the key goes regardless.
    assert table.lookup("x") is None
    assert table.lookup("b") is b


def test_unregister_command_requires_a_command() -> None:
    table = CommandTable()

    with pytest.raises(PreconditionViolation):
        table.unregister_command(None)  # type: ignore[arg-type]
    with pytest.raises(PreconditionViolation):
        table.unregister_command("ping")  # type: ignore[arg-type]


def test_unregister_command_by_reference() -> None:
    table = CommandTable()
    cmd = _cmd("ping", "p")
    table.register(cmd)

    table.unregister_command(cmd)

    assert table.lookup("ping") is None
    assert table.lookup("p") is None


def test_snapshots_are_immutable_and_not_updated_in_place() -> None:
    table = CommandTable()
    before = table.snapshot
    table.register(_cmd("ping"))

    assert before.by_name == {}
    with pytest.raises(TypeError):
        table.snapshot.by_name["other"] = _cmd("other")  # type: ignore[index]


def test_commands_lists_each_command_once() -> None:
    table = CommandTable()
    ping = _cmd("ping", "p", "pp")
    echo = _cmd("echo")
    table.register_many([ping, echo])

    assert set(table.commands()) == {ping, echo}
    assert len(table.commands()) == 2
