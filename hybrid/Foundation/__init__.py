from __future__ import annotations

from .AliasLoader import AliasLoader
from .Application import Application
from .Exceptions import NamespaceDetectionException, ProviderResolutionException
from .PackageManifest import PackageManifest
from .ProviderRepository import ProviderRepository
from .ServiceProvider import AggregateServiceProvider, DefaultProviders, ServiceProvider

__all__: list[str] = [
    'AggregateServiceProvider',
    'AliasLoader',
    'Application',
    'DefaultProviders',
    'NamespaceDetectionException',
    'PackageManifest',
    'ProviderRepository',
    'ProviderResolutionException',
    'ServiceProvider',
]
