"""
Event Facade
"""
from __future__ import annotations

from .Facade import Facade


class EventFacade(Facade):
    """Event facade for accessing the event dispatcher"""

    @staticmethod
    def get_facade_accessor() -> str:
        return 'events'


# Export the facade instance
Event = EventFacade()
