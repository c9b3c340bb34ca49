from __future__ import annotations

from typing import Any, Dict

from hybrid.Foundation.ServiceProvider import ServiceProvider
from hybrid.Support.Env import env
from hybrid.Support.Facades.Facade import Facade


def get_app_config() -> Dict[str, Any]:
    """
    Application configuration.

    This file holds the application's name, environment and debug mode, and
    the providers and aliases loaded when the application bootstraps.
    """

    return {
        # Application Name
        # Used wherever the framework or its packages need to show the
        # application's name.
        'name': env('APP_NAME', 'Hybrid'),

        # Application Environment
        # Determines the environment the application is currently running in.
        'env': env('APP_ENV', 'production'),

        # Application Debug Mode
        'debug': bool(env('APP_DEBUG', False)),

        # Application URL
        'url': env('APP_URL', 'http://localhost:8000'),

        'timezone': env('APP_TIMEZONE', 'UTC'),

        'locale': env('APP_LOCALE', 'en'),

        # Autoloaded Service Providers
        # Framework providers (`hybrid.*`) are registered first, then any
        # providers discovered from installed packages, then the rest of this
        # list. Deferred providers only load when a service they provide is
        # resolved.
        'providers': ServiceProvider.default_providers().merge([
            'app.Providers.AppServiceProvider:AppServiceProvider',
        ]).to_list(),

        # Class Aliases
        # Registered when the application starts and imported lazily, so they
        # can be imported from `hybrid.Support.Facades`.
        'aliases': Facade.default_aliases(),
    }
