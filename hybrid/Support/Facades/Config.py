from __future__ import annotations

from .Facade import Facade


class ConfigFacade(Facade):
    """Dot-notation access to the `config` repository loaded at bootstrap."""

    @staticmethod
    def get_facade_accessor() -> str:
        return 'config'


Config = ConfigFacade()
