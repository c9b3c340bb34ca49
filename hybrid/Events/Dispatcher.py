from __future__ import annotations

import fnmatch
import inspect
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Union

if TYPE_CHECKING:
    from hybrid.Container.Container import Container

Listener = Union[Callable[..., Any], type]


@dataclass
class EventSubscription:
    """A listener registered for an event name or wildcard pattern."""
    event: str
    listener: Listener
    priority: int = 0
    wildcard: bool = field(default=False)


class Dispatcher:
    """Synchronous string-event dispatcher."""

    def __init__(self, container: Optional[Container] = None) -> None:
        self.container = container
        self.listeners: Dict[str, List[EventSubscription]] = {}
        self.wildcards: List[EventSubscription] = []
        self.logger = logging.getLogger(self.__class__.__name__)

    def listen(self, events: Union[str, List[str]], listener: Listener, priority: int = 0) -> None:
        """Register an event listener with the dispatcher."""
        for event in ([events] if isinstance(events, str) else events):
            subscription = EventSubscription(event=event, listener=listener, priority=priority)

            if '*' in event:
                subscription.wildcard = True
                self.wildcards.append(subscription)
            else:
                self.listeners.setdefault(event, []).append(subscription)
                # Higher priority first; equal priorities keep registration order.
                self.listeners[event].sort(key=lambda s: -s.priority)

            self.logger.debug(f"Registered listener for event: {event}")

    def has_listeners(self, event: str) -> bool:
        """Determine if a given event has listeners."""
        return bool(self.listeners.get(event)) or self.has_wildcard_listeners(event)

    def has_wildcard_listeners(self, event: str) -> bool:
        """Determine if the given event has any wildcard listeners."""
        return any(fnmatch.fnmatchcase(event, s.event) for s in self.wildcards)

    def get_listeners(self, event: str) -> List[Listener]:
        """Get all of the listeners for a given event name."""
        subscriptions = list(self.listeners.get(event, []))
        subscriptions.extend(s for s in self.wildcards if fnmatch.fnmatchcase(event, s.event))
        return [s.listener for s in subscriptions]

    def dispatch(self, event: str, payload: Optional[List[Any]] = None, halt: bool = False) -> Any:
        """Fire an event and call the listeners.

        Listeners receive the event name followed by the payload. A listener
        returning ``False`` stops propagation; with ``halt`` the first
        non-``None`` response is returned.
        """
        payload = payload or []
        responses: List[Any] = []

        for listener in self.get_listeners(event):
            response = self._call_listener(listener, event, payload)

            if halt and response is not None:
                return response

            if response is False:
                break

            responses.append(response)

        return None if halt else responses

    def until(self, event: str, payload: Optional[List[Any]] = None) -> Any:
        """Fire an event until the first non-null response is returned."""
        return self.dispatch(event, payload, halt=True)

    def forget(self, event: str) -> None:
        """Remove a set of listeners from the dispatcher."""
        if '*' in event:
            self.wildcards = [s for s in self.wildcards if s.event != event]
        else:
            self.listeners.pop(event, None)

    def _call_listener(self, listener: Listener, event: str, payload: List[Any]) -> Any:
        if inspect.isclass(listener):
            if self.container is None:
                raise RuntimeError(f"Cannot resolve listener class {listener.__name__} without a container")
            handler = self.container.make(listener)
            return handler.handle(event, *payload)

        return listener(event, *payload)
