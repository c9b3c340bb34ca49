from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, List

from hybrid.Foundation.Bootstrap.RegisterProviders import RegisterProviders

if TYPE_CHECKING:
    from hybrid.Foundation.Application import Application
    from hybrid.Foundation.ServiceProvider import ProviderReference


class ApplicationBuilder:
    """Fluent configuration for a new application."""

    def __init__(self, app: Application) -> None:
        self.app = app

    def with_providers(self, providers: List[ProviderReference]) -> ApplicationBuilder:
        """Register extra providers alongside the configured ones."""
        existing = self.app.make(RegisterProviders).providers if self.app.bound(RegisterProviders) else []
        self.app.instance(RegisterProviders, RegisterProviders([*existing, *providers]))
        return self

    def with_bindings(self, bindings: Dict[Any, Any]) -> ApplicationBuilder:
        """Register bindings once the configured providers are registered."""
        def register_bindings(app: Application) -> None:
            for abstract, concrete in bindings.items():
                app.bind(abstract, concrete)

        return self.registered(register_bindings)

    def with_singletons(self, singletons: Dict[Any, Any]) -> ApplicationBuilder:
        """Register shared bindings once the configured providers are registered."""
        def register_singletons(app: Application) -> None:
            for abstract, concrete in singletons.items():
                app.singleton(abstract, concrete)

        return self.registered(register_singletons)

    def registered(self, callback: Callable[[Application], Any]) -> ApplicationBuilder:
        self.app.registered(callback)
        return self

    def booting(self, callback: Callable[[Application], Any]) -> ApplicationBuilder:
        self.app.booting(callback)
        return self

    def booted(self, callback: Callable[[Application], Any]) -> ApplicationBuilder:
        self.app.booted(callback)
        return self

    def create(self) -> Application:
        return self.app
