"""
Parameter markers resolved by the container.

Attach them with ``typing.Annotated``::

    def __init__(self, timezone: Annotated[str, Config('app.timezone', 'UTC')]) -> None: ...
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hybrid.Container.Container import Container


class ContextualAttribute(ABC):
    """A marker that resolves a parameter value from the container."""

    @abstractmethod
    def resolve(self, container: Container) -> Any:
        pass


class Config(ContextualAttribute):
    """Inject a configuration value."""

    def __init__(self, key: str, default: Any = None) -> None:
        self.key = key
        self.default = default

    def resolve(self, container: Container) -> Any:
        return container.make('config').get(self.key, self.default)


class Tag(ContextualAttribute):
    """Inject every service registered under a tag."""

    def __init__(self, tag: str) -> None:
        self.tag = tag

    def resolve(self, container: Container) -> Any:
        return container.tagged(self.tag)
