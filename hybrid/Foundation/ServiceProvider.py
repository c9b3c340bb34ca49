"""
Service Provider Base Class
"""
from __future__ import annotations

import inspect
import pkgutil
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Union

from hybrid.Contracts.DeferrableProvider import DeferrableProvider
from hybrid.Foundation.Exceptions import ProviderResolutionException
from hybrid.Support.Arr import Arr

if TYPE_CHECKING:
    from hybrid.Foundation.Application import Application

ProviderReference = Union[str, type, 'ServiceProvider']


def provider_key(provider: ProviderReference) -> str:
    """Get the `module:QualName` key identifying a provider class."""
    if isinstance(provider, str):
        if ':' in provider:
            return provider
        module, _, name = provider.rpartition('.')
        if not module:
            return name
        # A dotted path cannot tell a nested class from a module, so import it.
        try:
            resolved = pkgutil.resolve_name(provider)
        except (ImportError, AttributeError, ValueError):
            return f"{module}:{name}"
        if not inspect.isclass(resolved):
            return f"{module}:{name}"
        provider = resolved

    cls = provider if inspect.isclass(provider) else type(provider)
    return f"{cls.__module__}:{cls.__qualname__}"


def resolve_provider_class(name: str) -> type:
    """Import the provider class behind a dotted or `module:Name` path."""
    try:
        provider = pkgutil.resolve_name(provider_key(name))
    except (ImportError, AttributeError, ValueError) as e:
        raise ProviderResolutionException(f"Service provider [{name}] could not be imported: {e}") from e

    if not (inspect.isclass(provider) and issubclass(provider, ServiceProvider)):
        raise ProviderResolutionException(f"[{name}] is not a service provider class.")

    return provider


class ServiceProvider:
    """
    Base class for service providers.

    `register` only binds things into the container. `boot` runs once every
    provider has registered and is invoked through `app.call`, so it may
    declare dependencies to inject.
    """

    def __init__(self, app: Application) -> None:
        self.app = app
        self._booting_callbacks: List[Callable[..., Any]] = []
        self._booted_callbacks: List[Callable[..., Any]] = []
        self._registered = False
        self._booted = False

    def register(self) -> None:
        """Register any application services."""
        pass

    def boot(self) -> None:
        """Bootstrap any application services."""
        pass

    def bindings(self) -> Dict[Any, Any]:
        """Bindings registered into the container alongside `register`."""
        return {}

    def singletons(self) -> Dict[Any, Any]:
        """Shared bindings registered into the container alongside `register`."""
        return {}

    def provides(self) -> List[Any]:
        """Get the services provided by the provider."""
        return []

    def is_deferred(self) -> bool:
        """Determine if the provider is deferred."""
        return isinstance(self, DeferrableProvider)

    def booting(self, callback: Callable[..., Any]) -> None:
        """Register a callback to run before this provider boots."""
        self._booting_callbacks.append(callback)

    def booted(self, callback: Callable[..., Any]) -> None:
        """Register a callback to run after this provider boots."""
        self._booted_callbacks.append(callback)

    def call_booting_callbacks(self) -> None:
        """Call the registered booting callbacks."""
        index = 0
        # Callbacks may queue more callbacks while the queue drains.
        while index < len(self._booting_callbacks):
            self.app.call(self._booting_callbacks[index])
            index += 1

    def call_booted_callbacks(self) -> None:
        """Call the registered booted callbacks."""
        index = 0
        while index < len(self._booted_callbacks):
            self.app.call(self._booted_callbacks[index])
            index += 1

    def merge_config_from(self, path: str, key: str) -> None:
        """Merge the given configuration file under a key, keeping values already set."""
        if self.app.configuration_is_cached():
            return

        from hybrid.Foundation.Bootstrap.LoadConfiguration import LoadConfiguration

        config = self.app.make('config')
        defaults = LoadConfiguration.load_file(path)
        config.set(key, Arr.merge_recursive(defaults, config.get(key, {}) or {}))

    def is_registered(self) -> bool:
        return self._registered

    def is_booted(self) -> bool:
        return self._booted

    def mark_as_registered(self) -> None:
        self._registered = True

    def mark_as_booted(self) -> None:
        self._booted = True

    @classmethod
    def default_providers(cls) -> DefaultProviders:
        """Get the default providers for a Hybrid application."""
        return DefaultProviders()

    def __repr__(self) -> str:
        return f"<{provider_key(self)}>"


class AggregateServiceProvider(ServiceProvider):
    """Registers a group of providers as one."""

    providers: List[ProviderReference] = []

    def __init__(self, app: Application) -> None:
        super().__init__(app)
        self._instances: List[ServiceProvider] = []

    def register(self) -> None:
        self._instances = [self.app.register(provider) for provider in self.providers]

    def provides(self) -> List[Any]:
        provides: List[Any] = []
        for provider in self.providers:
            provides.extend(self.app.resolve_provider(provider).provides())
        return provides


class DefaultProviders:
    """An ordered, immutable-by-convention list of provider references."""

    def __init__(self, providers: Optional[List[ProviderReference]] = None) -> None:
        self.providers: List[ProviderReference] = list(providers) if providers is not None else [
            'hybrid.Providers.CoreServiceProvider:CoreServiceProvider',
            'hybrid.Providers.FilesystemServiceProvider:FilesystemServiceProvider',
            'hybrid.Providers.LogServiceProvider:LogServiceProvider',
        ]

    def merge(self, providers: List[ProviderReference]) -> DefaultProviders:
        """Append the given providers."""
        return DefaultProviders(self.providers + list(providers))

    def replace(self, replacements: Dict[ProviderReference, ProviderReference]) -> DefaultProviders:
        """Swap providers in place, keeping their position."""
        current = list(self.providers)
        keys = [provider_key(p) for p in current]

        for old, new in replacements.items():
            if provider_key(old) in keys:
                current[keys.index(provider_key(old))] = new

        return DefaultProviders(current)

    def except_(self, providers: List[ProviderReference]) -> DefaultProviders:
        """Drop the given providers."""
        excluded = {provider_key(p) for p in providers}
        return DefaultProviders([p for p in self.providers if provider_key(p) not in excluded])

    def to_list(self) -> List[ProviderReference]:
        return list(self.providers)
