from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

from hybrid.Events.Dispatcher import Dispatcher
from hybrid.Foundation.ServiceProvider import ServiceProvider

if TYPE_CHECKING:
    from hybrid.Foundation.Application import Application


class EventServiceProvider(ServiceProvider):
    """
    Registers the event dispatcher under `events`.

    Subclasses map event names to listeners through `listen`; they are
    attached when the provider boots.
    """

    # The event listener mappings for the application
    listen: Dict[str, List[Any]] = {}

    def register(self) -> None:
        """Register the event services."""
        self.app.singleton('events', lambda app: Dispatcher(app))

    def boot(self) -> None:
        """Boot the event services."""
        self.register_event_listeners()

    def register_event_listeners(self) -> None:
        """Register the event listeners."""
        events: Dispatcher = self.app.make('events')

        for event, listeners in self.listen.items():
            for listener in listeners:
                events.listen(event, listener)
