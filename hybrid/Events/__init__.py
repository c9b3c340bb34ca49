from .Dispatcher import Dispatcher, EventSubscription

__all__ = ["Dispatcher", "EventSubscription"]
