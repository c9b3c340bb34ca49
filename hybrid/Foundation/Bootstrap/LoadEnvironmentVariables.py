from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from hybrid.Support.Env import Env

if TYPE_CHECKING:
    from hybrid.Foundation.Application import Application


class LoadEnvironmentVariables:
    """Loads the `.env` file into the process environment."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)

    def bootstrap(self, app: Application) -> None:
        if app.configuration_is_cached():
            return

        self.check_for_specific_environment_file(app)

        path = app.environment_file_path()

        try:
            # Variables already present in the environment win.
            loaded = load_dotenv(path, override=False)
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(f"Unable to load environment file {path}: {e}")
            raise

        if loaded:
            self.logger.debug(f"Loaded environment from {path}")

    def check_for_specific_environment_file(self, app: Application) -> None:
        """Switch to `.env.<name>` when an environment is requested."""
        if app.running_in_console():
            option = app.console_environment_option()
            if option and self.set_environment_file_path(app, f"{app.environment_file()}.{option}"):
                return

        environment = Env.get('HYBRID_CORE_ENV')

        if not environment:
            return

        self.set_environment_file_path(app, f"{app.environment_file()}.{environment}")

    def set_environment_file_path(self, app: Application, file: str) -> bool:
        """Load a custom environment file if it exists."""
        if os.path.isfile(os.path.join(app.environment_path(), file)):
            app.load_environment_from(file)
            return True

        return False
