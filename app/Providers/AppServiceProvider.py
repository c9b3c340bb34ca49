from __future__ import annotations

from hybrid.Config.Repository import Repository
from hybrid.Foundation.ServiceProvider import ServiceProvider
from hybrid.Log.LogManager import LogManager


class AppServiceProvider(ServiceProvider):
    """Application service provider."""

    def register(self) -> None:
        """Register any application services."""
        pass

    def boot(self, config: Repository, log: LogManager) -> None:
        """Bootstrap any application services."""
        name = config.get('app.name')
        self.app.terminating(lambda: log.info(f"{name} is shutting down"))
