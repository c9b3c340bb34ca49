from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator

import pytest

from hybrid.Container.Container import Container
from hybrid.Foundation.AliasLoader import AliasLoader
from hybrid.Foundation.Application import Application
from hybrid.Support.Facades.Facade import Facade


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep cache overrides and global accessors from leaking between tests."""
    for key in ('APP_SERVICES_CACHE', 'APP_PACKAGES_CACHE', 'APP_CONFIG_CACHE',
                'APP_RUNNING_IN_CONSOLE', 'HYBRID_CORE_ENV', 'APP_ENV'):
        monkeypatch.delenv(key, raising=False)

    yield

    Container.set_instance(None)
    AliasLoader.set_instance(None)
    Facade.set_facade_application(None)
    Facade.clear_resolved_instances()


@pytest.fixture
def base_path(tmp_path: Path) -> Path:
    """An empty application skeleton."""
    (tmp_path / 'config').mkdir()
    return tmp_path


@pytest.fixture
def app(base_path: Path) -> Application:
    return Application(str(base_path))


@pytest.fixture
def write_config(base_path: Path) -> Callable[[str, str], Path]:
    """Write a config module below `config/`."""

    def write(name: str, source: str) -> Path:
        path = base_path / 'config' / f'{name}.py'
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding='utf-8')
        return path

    return write
