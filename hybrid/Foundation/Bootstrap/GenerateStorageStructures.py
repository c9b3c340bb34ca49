from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from hybrid.Filesystem.Filesystem import Filesystem

if TYPE_CHECKING:
    from hybrid.Foundation.Application import Application


class GenerateStorageStructures:
    """Creates the writable directories the framework expects."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)

    def bootstrap(self, app: Application) -> None:
        files = Filesystem()

        for directory in self.directories(app):
            if files.missing(directory):
                files.ensure_directory_exists(directory)
                self.logger.debug(f"Created directory {directory}")

    def directories(self, app: Application) -> List[str]:
        return [
            app.bootstrap_path('cache'),
            app.storage_path('app/public'),
            app.storage_path('framework/cache'),
            app.storage_path('framework/views'),
            app.storage_path('logs'),
        ]
