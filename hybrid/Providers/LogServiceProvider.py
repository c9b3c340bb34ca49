from __future__ import annotations

from typing import Any, List

from hybrid.Contracts.DeferrableProvider import DeferrableProvider
from hybrid.Foundation.ServiceProvider import ServiceProvider
from hybrid.Log.LogManager import LogManager


class LogServiceProvider(ServiceProvider, DeferrableProvider):
    """Registers the log manager under `log` on first use."""

    def register(self) -> None:
        self.app.singleton('log', lambda app: LogManager(app))

    def provides(self) -> List[Any]:
        return ['log']
