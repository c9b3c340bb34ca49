from __future__ import annotations

from .Bootstrapper import Bootstrapper
from .DeferrableProvider import DeferrableProvider

__all__: list[str] = [
    'Bootstrapper',
    'DeferrableProvider',
]
