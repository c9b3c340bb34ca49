from __future__ import annotations

import logging
import os
import tomllib
from importlib.metadata import EntryPoint, entry_points
from typing import Any, Dict, List, Optional

from hybrid.Filesystem.Filesystem import Filesystem

PROVIDERS_GROUP = 'hybrid.providers'
ALIASES_GROUP = 'hybrid.aliases'


class PackageManifest:
    """
    Discovers providers and aliases shipped by installed distributions.

    A distribution opts in through entry points::

        [project.entry-points."hybrid.providers"]
        cache = "acme_cache.Provider:CacheServiceProvider"

        [project.entry-points."hybrid.aliases"]
        Cache = "acme_cache.Facades:Cache"

    The application can opt out of discovery with
    ``[tool.hybrid] dont-discover = ["acme-cache"]`` (or ``["*"]``).
    """

    def __init__(self, files: Filesystem, base_path: str, manifest_path: str) -> None:
        self.files = files
        self.base_path = base_path
        self.manifest_path = manifest_path
        self.manifest: Optional[Dict[str, Dict[str, Any]]] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    def providers(self) -> List[str]:
        """Get all of the service provider names for all packages."""
        providers: List[str] = []
        for configuration in self.get_manifest().values():
            providers.extend(configuration.get('providers', []))
        return providers

    def aliases(self) -> Dict[str, str]:
        """Get all of the aliases for all packages."""
        aliases: Dict[str, str] = {}
        for configuration in self.get_manifest().values():
            aliases.update(configuration.get('aliases', {}))
        return aliases

    def get_manifest(self) -> Dict[str, Dict[str, Any]]:
        """Get the current package manifest, building it when missing."""
        if self.manifest is not None:
            return self.manifest

        if not self.files.exists(self.manifest_path):
            self.build()

        self.manifest = self.files.get_json(self.manifest_path) if self.files.exists(self.manifest_path) else {}
        return self.manifest

    def build(self) -> None:
        """Build the manifest and write it to disk."""
        ignore = self.packages_to_ignore()
        ignore_all = '*' in ignore
        manifest: Dict[str, Dict[str, Any]] = {}

        for group, section in ((PROVIDERS_GROUP, 'providers'), (ALIASES_GROUP, 'aliases')):
            for entry_point in entry_points(group=group):
                package = self._package_name(entry_point)

                if ignore_all or package in ignore:
                    continue

                configuration = manifest.setdefault(package, {'providers': [], 'aliases': {}})

                if section == 'providers':
                    configuration['providers'].append(entry_point.value)
                else:
                    configuration['aliases'][entry_point.name] = entry_point.value

        self.files.put_json(self.manifest_path, manifest)
        self.manifest = None

        self.logger.debug(f"Discovered {len(manifest)} packages")

    def packages_to_ignore(self) -> List[str]:
        """Get the distributions that should not be discovered."""
        pyproject = os.path.join(self.base_path, 'pyproject.toml')

        if not self.files.is_file(pyproject):
            return []

        with open(pyproject, 'rb') as handle:
            data = tomllib.load(handle)

        return list(data.get('tool', {}).get('hybrid', {}).get('dont-discover', []))

    def _package_name(self, entry_point: EntryPoint) -> str:
        dist = getattr(entry_point, 'dist', None)
        return dist.name if dist is not None else entry_point.module.split('.')[0]
