from __future__ import annotations

from .CoreServiceProvider import CoreServiceProvider
from .EventServiceProvider import EventServiceProvider
from .FilesystemServiceProvider import FilesystemServiceProvider
from .LogServiceProvider import LogServiceProvider

__all__: list[str] = [
    'CoreServiceProvider',
    'EventServiceProvider',
    'FilesystemServiceProvider',
    'LogServiceProvider',
]
