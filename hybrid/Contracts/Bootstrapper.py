from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from hybrid.Foundation.Application import Application


@runtime_checkable
class Bootstrapper(Protocol):
    """A single step of the application bootstrap pipeline."""

    def bootstrap(self, app: Application) -> None:
        ...
