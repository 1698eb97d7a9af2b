"""In-memory event bus implementation."""

import logging
from collections import defaultdict, deque
from collections.abc import Callable

from salatuk.domain.events import DomainEvent
from salatuk.services.ports import EventBusPort

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class InMemoryEventBus(EventBusPort):
    """
    Synchronous in-process event bus.

    Handlers subscribed to a base class receive its subclasses too, so a
    ``DomainEvent`` subscriber sees every event. The last *history_size* events
    are kept for status reporting.
    """

    def __init__(self, history_size: int = 20) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)
        self._history: deque[DomainEvent] = deque(maxlen=history_size)

    def publish(self, event: DomainEvent) -> None:
        """Deliver *event* to its subscribers; a failing handler does not stop the rest."""
        self._history.append(event)
        handlers = [
            handler
            for event_type in type(event).__mro__
            if issubclass(event_type, DomainEvent)
            for handler in self._handlers.get(event_type, [])
        ]
        logger.debug(f"{type(event).__name__} -> {len(handlers)} handler(s)")

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Handler {handler!r} failed on {type(event).__name__}")

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def recent(self, limit: int | None = None) -> list[DomainEvent]:
        """Most recently published events, oldest first."""
        events = list(self._history)
        return events if limit is None else events[max(len(events) - limit, 0) :]
