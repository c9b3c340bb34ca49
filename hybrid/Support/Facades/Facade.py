from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from hybrid.Container.Container import Container


class Facade(ABC):
    """
    Base facade class similar to Laravel's Facade.

    Provides static-like access to services registered in the container.
    Each facade module exports a ready instance, so `Config.get('app.name')`
    forwards to the `config` binding.
    """

    _app: Optional[Container] = None
    _resolved_instances: Dict[str, Any] = {}

    @staticmethod
    @abstractmethod
    def get_facade_accessor() -> str:
        """Get the registered name of the component."""
        pass

    @classmethod
    def set_facade_application(cls, app: Optional[Container]) -> None:
        """Set the application instance facades resolve from."""
        Facade._app = app

    @classmethod
    def get_facade_application(cls) -> Optional[Container]:
        return Facade._app

    @classmethod
    def resolve_facade_instance(cls, name: str) -> Any:
        """Resolve the facade root instance from the container."""
        if name in Facade._resolved_instances:
            return Facade._resolved_instances[name]

        if Facade._app is None:
            raise RuntimeError(f"A facade root has not been set for '{name}'")

        instance = Facade._app.make(name)
        Facade._resolved_instances[name] = instance
        return instance

    def get_facade_root(self) -> Any:
        """Get the root object behind the facade."""
        return self.resolve_facade_instance(self.get_facade_accessor())

    def swap(self, instance: Any) -> None:
        """Hotswap the underlying instance behind the facade."""
        accessor = self.get_facade_accessor()
        Facade._resolved_instances[accessor] = instance

        if Facade._app is not None:
            Facade._app.instance(accessor, instance)

    @classmethod
    def clear_resolved_instance(cls, name: str) -> None:
        Facade._resolved_instances.pop(name, None)

    @classmethod
    def clear_resolved_instances(cls) -> None:
        Facade._resolved_instances.clear()

    @staticmethod
    def default_aliases() -> Dict[str, str]:
        """Get the application's default facade aliases."""
        return {
            'App': 'hybrid.Support.Facades.App:App',
            'Config': 'hybrid.Support.Facades.Config:Config',
            'Event': 'hybrid.Support.Facades.Event:Event',
            'File': 'hybrid.Support.Facades.File:File',
            'Log': 'hybrid.Support.Facades.Log:Log',
        }

    def __getattr__(self, name: str) -> Any:
        """Forward attribute access to the facade root."""
        if name.startswith('__'):
            raise AttributeError(name)
        return getattr(self.get_facade_root(), name)
