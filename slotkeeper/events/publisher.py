"""Event publisher - dispatches domain events to in-process handlers."""
from collections import defaultdict
import logging
from typing import Any, Callable, DefaultDict, Dict, List, Protocol, Sequence, Type


logger = logging.getLogger(__name__)


class Event(Protocol):
    """Protocol for event types."""

    def to_dict(self) -> Dict[str, Any]:
        ...


EventHandler = Callable[[Any], None]


class EventPublisher:
    """
    Publishes domain events to registered handlers.

    Services publish only after their transaction commits. Dispatch is
    synchronous; a failing handler is logged and never affects the caller
    or the other handlers.
    """

    def __init__(self) -> None:
        self._handlers: DefaultDict[Type[Any], List[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: Type[Any], handler: EventHandler) -> None:
        """Register ``handler`` for events of exactly ``event_type``."""
        self._handlers[event_type].append(handler)

    def handlers_for(self, event_type: Type[Any]) -> Sequence[EventHandler]:
        return tuple(self._handlers.get(event_type, ()))

    def publish(self, event: Event) -> int:
        """
        Dispatch an event to its handlers.

        Returns:
            Number of handlers that completed without raising
        """
        event_type = type(event)
        handlers = self.handlers_for(event_type)
        if not handlers:
            logger.debug("No handlers for event type: %s", event_type.__name__)
            return 0

        succeeded = 0
        for handler in handlers:
            try:
                handler(event)
                succeeded += 1
            except Exception:
                logger.exception(
                    "Event handler %s failed for %s",
                    getattr(handler, "__qualname__", repr(handler)),
                    event_type.__name__,
                )

        logger.info("event=%s handlers=%d succeeded=%d", event_type.__name__, len(handlers), succeeded)
        return succeeded
