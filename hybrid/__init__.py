from __future__ import annotations

from hybrid.Container import Container
from hybrid.Foundation.Application import Application, app, config
from hybrid.Foundation.ServiceProvider import ServiceProvider
from hybrid.Support.Env import env

__version__ = Application.VERSION

__all__: list[str] = [
    'Application',
    'Container',
    'ServiceProvider',
    'app',
    'config',
    'env',
]
