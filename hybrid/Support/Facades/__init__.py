from __future__ import annotations

from typing import Any

from hybrid.Foundation.AliasLoader import AliasLoader

from .App import App
from .Config import Config
from .Event import Event
from .Facade import Facade
from .File import File
from .Log import Log

__all__: list[str] = [
    'App',
    'Config',
    'Event',
    'Facade',
    'File',
    'Log',
]


def __getattr__(name: str) -> Any:
    # Aliases registered at bootstrap are importable from here.
    loader = AliasLoader.get_instance()

    if loader.is_registered() and name in loader.get_aliases():
        return loader.load(name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
