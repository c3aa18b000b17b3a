from importlib.metadata import EntryPoint, EntryPoints

import pytest
import structlog

from cmdroute import plugins
from cmdroute.manager import CommandManager
from tests.fakes import FakeContext


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def manager() -> CommandManager:
    return CommandManager("!")


@pytest.fixture
def make_ctx():
    def _factory(content: str, **kwargs) -> FakeContext:
        return FakeContext(content=content, **kwargs)

    return _factory


@pytest.fixture
def handler_plugins(monkeypatch):
    """Pretend only the given entry points are installed.

    Each entry is ``name -> "module:attr"`` in the handler group; pass a
    ``(group, "module:attr")`` tuple to publish under another group.
    """

    def _install(**entries: str | tuple[str, str]) -> EntryPoints:
        installed: list[EntryPoint] = []
        for name, target in entries.items():
            group, value = (
                target if isinstance(target, tuple) else (plugins.HANDLER_GROUP, target)
            )
            installed.append(EntryPoint(name=name, value=value, group=group))
        fake = EntryPoints(installed)
        monkeypatch.setattr(plugins, "entry_points", lambda: fake)
        return fake

    return _install
