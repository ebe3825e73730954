import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Type

from ..utils.logging import get_logger


@dataclass(kw_only=True)
class Event:
    """Base event class."""
    timestamp: datetime = field(default_factory=datetime.now)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class Subscription:
    """Handle returned by subscribe(); can be used to unsubscribe."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_type: Type = Event
    handler: Callable = field(default=lambda e: None)
    active: bool = True

    def cancel(self):
        self.active = False


class EventBus:
    """Synchronous publish/subscribe hub.

    Everything in a triage session runs on one logical thread, so handlers
    are invoked inline in subscription order.  A failing handler is logged
    and never interrupts the publisher.
    """

    def __init__(self, logger: logging.Logger = None):
        self._logger = logger or get_logger("events")
        self._handlers: Dict[Type[Event], List[Subscription]] = defaultdict(list)

    def subscribe(self, event_type: Type[Event], handler: Callable) -> Subscription:
        sub = Subscription(event_type=event_type, handler=handler)
        self._handlers[event_type].append(sub)
        return sub

    def unsubscribe(self, subscription: Subscription):
        subscription.active = False
        for subs in self._handlers.values():
            try:
                subs.remove(subscription)
            except ValueError:
                pass

    def publish(self, event: Event):
        event_type = type(event)
        # Snapshot so handlers may (un)subscribe while being notified.
        for sub in list(self._handlers[event_type]):
            if not sub.active:
                continue
            try:
                sub.handler(event)
            except Exception as e:
                self._logger.error("Handler failed for %s: %s", event_type.__name__, e)
