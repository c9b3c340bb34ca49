from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from hybrid.Support.Arr import Arr

if TYPE_CHECKING:
    from hybrid.Foundation.Application import Application
    from hybrid.Foundation.ServiceProvider import ProviderReference


class RegisterProviders:
    """Registers the configured providers, plus any passed in by the builder."""

    def __init__(self, providers: Optional[List[ProviderReference]] = None) -> None:
        self.providers: List[ProviderReference] = list(providers or [])

    def bootstrap(self, app: Application) -> None:
        loaded_from_cache = app.bound('config_loaded_from_cache') and app.make('config_loaded_from_cache')

        if self.providers and not loaded_from_cache:
            config = app.make('config')
            config.set('app.providers', Arr.unique([*(config.get('app.providers') or []), *self.providers]))

        app.register_configured_providers()
