from __future__ import annotations

import inspect
import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict

from hybrid.Config.Repository import Repository
from hybrid.Filesystem.Filesystem import Filesystem

if TYPE_CHECKING:
    from hybrid.Foundation.Application import Application


class LoadConfiguration:
    """
    Loads the configuration repository.

    A JSON cache at `bootstrap/cache/config.json` wins when it exists.
    Otherwise every module below `config/` is executed and its values are
    stored under its file name; nested directories give dotted keys, so
    `config/services/mail.py` lands under `services.mail`.

    A config module either defines `get_<name>_config()` returning a dict,
    or exposes its settings as public module-level names.
    """

    def bootstrap(self, app: Application) -> None:
        files = Filesystem()
        items: Dict[str, Any] = {}
        loaded_from_cache = False

        cached = app.get_cached_config_path()

        if files.is_file(cached):
            items = files.get_json(cached)
            loaded_from_cache = True

        config = Repository(items)
        app.instance('config', config)
        app.instance('config_loaded_from_cache', loaded_from_cache)

        if not loaded_from_cache:
            self.load_configuration_files(app, config)

        app.detect_environment(lambda: config.get('app.env', 'production'))

    def load_configuration_files(self, app: Application, repository: Repository) -> None:
        """Load the configuration items from all of the files."""
        for key, path in self.get_configuration_files(app).items():
            repository.set(key, self.load_file(path))

    def get_configuration_files(self, app: Application) -> Dict[str, str]:
        """Get all of the configuration files for the application."""
        config_path = Path(app.config_path())

        if not config_path.is_dir():
            return {}

        files: Dict[str, str] = {}

        for file in Filesystem().all_files(config_path, '*.py'):
            if file.name.startswith('_'):
                continue

            nested = file.parent.relative_to(config_path).parts
            key = '.'.join([*nested, file.stem])
            files[key] = str(file.resolve())

        return dict(sorted(files.items(), key=lambda item: _natural_key(item[0])))

    @staticmethod
    def load_file(path: str) -> Dict[str, Any]:
        """Execute a config module and collect its values."""
        namespace = Filesystem().require(path)
        name = os.path.splitext(os.path.basename(path))[0]

        factory = namespace.get(f'get_{name}_config')
        if callable(factory):
            return factory()

        return {key: value for key, value in namespace.items() if _is_config_value(key, value)}


def _is_config_value(key: str, value: Any) -> bool:
    if key.startswith('_') or inspect.ismodule(value) or inspect.isclass(value) or inspect.isroutine(value):
        return False
    # Imported typing helpers and `from __future__` features are not settings.
    return type(value).__module__ != '__future__' and getattr(value, '__module__', None) != 'typing'


def _natural_key(value: str) -> list:
    return [int(part) if part.isdigit() else part for part in re.split(r'(\d+)', value)]
