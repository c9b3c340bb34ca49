"""
App Facade
"""
from __future__ import annotations

from .Facade import Facade


class AppFacade(Facade):
    """App facade for accessing the application"""

    @staticmethod
    def get_facade_accessor() -> str:
        return 'app'


# Export the facade instance
App = AppFacade()
