from __future__ import annotations

import inspect
import logging
import pkgutil
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from hybrid.Filesystem.Filesystem import Filesystem
from hybrid.Foundation.ServiceProvider import ProviderReference, ServiceProvider, provider_key

if TYPE_CHECKING:
    from hybrid.Foundation.Application import Application

# provider key -> services it provides; an empty list means eager.
Manifest = Dict[str, List[Any]]


class ProviderRepository:
    """
    Splits the configured providers into eager and deferred ones.

    The split is compiled into a JSON manifest so deferred providers are
    neither imported nor instantiated on later runs until needed.
    """

    def __init__(self, app: Application, files: Filesystem, manifest_path: Optional[str] = None) -> None:
        self.app = app
        self.files = files
        self.manifest_path = manifest_path
        self.logger = logging.getLogger(self.__class__.__name__)

    def load(self, providers: List[ProviderReference]) -> None:
        """Register the application service providers."""
        manifest = self.load_manifest()

        if self.should_recompile(manifest, providers):
            manifest = self.compile_manifest(providers)

        deferred: Dict[Any, str] = {}

        for provider, services in manifest.items():
            for service in services:
                deferred[service] = provider

        self.app.add_deferred_services(deferred)

        for provider, services in manifest.items():
            if not services:
                self.app.register(provider)

    def load_manifest(self) -> Optional[Manifest]:
        """Load the service provider manifest file."""
        if not self.manifest_path or not self.files.exists(self.manifest_path):
            return None

        raw = self.files.get_json(self.manifest_path)

        return {provider: [self._decode(service) for service in services] for provider, services in raw.items()}

    def should_recompile(self, manifest: Optional[Manifest], providers: List[ProviderReference]) -> bool:
        """Determine if the manifest should be compiled."""
        return manifest is None or list(manifest.keys()) != [provider_key(p) for p in providers]

    def compile_manifest(self, providers: List[ProviderReference]) -> Manifest:
        """Compile the application service manifest file."""
        manifest: Manifest = {}

        for provider in providers:
            instance = self.create_provider(provider)
            manifest[provider_key(provider)] = list(instance.provides()) if instance.is_deferred() else []

        return self.write_manifest(manifest)

    def write_manifest(self, manifest: Manifest) -> Manifest:
        """Write the service manifest file to disk."""
        if self.manifest_path:
            encoded = {provider: [self._encode(s) for s in services] for provider, services in manifest.items()}
            self.files.put_json(self.manifest_path, encoded)
            self.logger.debug(f"Wrote services manifest to {self.manifest_path}")

        return manifest

    def create_provider(self, provider: ProviderReference) -> ServiceProvider:
        """Create a new provider instance."""
        return self.app.resolve_provider(provider)

    def _encode(self, service: Any) -> Any:
        if inspect.isclass(service):
            return {'class': f"{service.__module__}:{service.__qualname__}"}
        return service

    def _decode(self, service: Any) -> Any:
        if isinstance(service, dict) and 'class' in service:
            return pkgutil.resolve_name(service['class'])
        return service
