from __future__ import annotations

import pkgutil
from typing import Any, Dict, Optional


class AliasLoader:
    """
    Maps short names to import paths (`module:attr`).

    Targets are imported on first use. Once registered, aliases can be
    imported from `hybrid.Support.Facades`.
    """

    _instance: Optional[AliasLoader] = None

    def __init__(self, aliases: Optional[Dict[str, str]] = None) -> None:
        self._aliases: Dict[str, str] = dict(aliases or {})
        self._loaded: Dict[str, Any] = {}
        self._registered = False

    @classmethod
    def get_instance(cls, aliases: Optional[Dict[str, str]] = None) -> AliasLoader:
        """Get or create the singleton alias loader, merging any new aliases."""
        if cls._instance is None:
            cls._instance = cls(aliases)
            return cls._instance

        if aliases:
            cls._instance.set_aliases({**cls._instance.get_aliases(), **aliases})

        return cls._instance

    @classmethod
    def set_instance(cls, loader: Optional[AliasLoader]) -> None:
        cls._instance = loader

    def load(self, alias: str) -> Any:
        """Import the target behind an alias."""
        if alias not in self._loaded:
            if alias not in self._aliases:
                raise KeyError(f"Alias [{alias}] is not registered.")
            self._loaded[alias] = pkgutil.resolve_name(self._aliases[alias])

        return self._loaded[alias]

    def alias(self, alias: str, target: str) -> None:
        """Add an alias to the loader."""
        self._aliases[alias] = target
        self._loaded.pop(alias, None)

    def register(self) -> None:
        self._registered = True

    def is_registered(self) -> bool:
        return self._registered

    def set_registered(self, value: bool) -> None:
        self._registered = value

    def get_aliases(self) -> Dict[str, str]:
        return dict(self._aliases)

    def set_aliases(self, aliases: Dict[str, str]) -> None:
        self._aliases = dict(aliases)
        self._loaded.clear()
