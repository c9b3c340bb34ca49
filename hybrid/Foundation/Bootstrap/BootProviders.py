from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hybrid.Foundation.Application import Application


class BootProviders:

    def bootstrap(self, app: Application) -> None:
        app.boot()
