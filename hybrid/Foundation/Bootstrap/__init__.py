from __future__ import annotations

from .BootProviders import BootProviders
from .GenerateStorageStructures import GenerateStorageStructures
from .LoadConfiguration import LoadConfiguration
from .LoadEnvironmentVariables import LoadEnvironmentVariables
from .RegisterFacades import RegisterFacades
from .RegisterProviders import RegisterProviders

__all__: list[str] = [
    'BootProviders',
    'GenerateStorageStructures',
    'LoadConfiguration',
    'LoadEnvironmentVariables',
    'RegisterFacades',
    'RegisterProviders',
]
