import logging
from abc import ABC
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

logger = logging.getLogger(__name__)


def event(cls):
    return dataclass(frozen=True, slots=True)(cls)


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainEvent(ABC):
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class EventDispatcher:
    """Synchronous event dispatcher for domain events.

    Components that emit events take a dispatcher at construction time; there
    is no process-wide instance. Handlers run in subscription order inside the
    call that produced the event. Exceptions in handlers are logged but don't
    stop dispatch to other handlers.
    """

    def __init__(self):
        self._handlers: dict[type[DomainEvent], list[Callable]] = defaultdict(list)

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: Callable[[DomainEvent], None],
    ):
        """Register a handler for an event type.

        Args:
            event_type: The event class to subscribe to
            handler: Callable that accepts the event
        """
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type[DomainEvent], handler: Callable):
        """Unregister a handler from an event type."""
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def publish(self, event: DomainEvent):
        """Dispatch event to all registered handlers.

        Args:
            event: The domain event to dispatch
        """
        handlers = list(self._handlers[type(event)])
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Event handler {getattr(handler, '__name__', handler)!r} failed "
                    f"for {event.__class__.__name__}: {e}",
                    exc_info=True,
                )


class EventRecorder:
    """Collects published events in order; a polling alternative to callbacks."""

    def __init__(self, dispatcher: EventDispatcher, *event_types: type[DomainEvent]):
        self.events: list[DomainEvent] = []
        for event_type in event_types:
            dispatcher.subscribe(event_type, self._record)

    def _record(self, event: DomainEvent) -> None:
        self.events.append(event)

    def drain(self) -> list[DomainEvent]:
        """Return the collected events and forget them."""
        out, self.events = self.events, []
        return out
