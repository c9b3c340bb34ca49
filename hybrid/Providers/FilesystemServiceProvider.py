from __future__ import annotations

from typing import Any, List

from hybrid.Contracts.DeferrableProvider import DeferrableProvider
from hybrid.Filesystem.Filesystem import Filesystem
from hybrid.Foundation.ServiceProvider import ServiceProvider


class FilesystemServiceProvider(ServiceProvider, DeferrableProvider):
    """Registers the local filesystem under `files` on first use."""

    def register(self) -> None:
        self.app.singleton('files', lambda app: Filesystem())

    def provides(self) -> List[Any]:
        return ['files']
