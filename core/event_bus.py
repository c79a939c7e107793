"""
Event bus for invoicing domain events.

Synchronous in-process pub/sub. Handlers run in the publishing thread right
after the invoice write commits. A failing handler is logged and skipped;
it never undoes or fails the operation that published the event.
"""

import logging
from typing import Callable

from core.events import InvoicingEvent

logger = logging.getLogger(__name__)

Handler = Callable[[InvoicingEvent], None]


class EventBus:
    """
    In-process event bus keyed by event class.

    A handler subscribed to a base class receives every subclass too, so
    subscribing to InvoicingEvent observes the whole stream.
    """

    def __init__(self):
        self._subscribers: dict[type[InvoicingEvent], list[Handler]] = {}

    def subscribe(self, event_type: type[InvoicingEvent], callback: Handler) -> None:
        """
        Subscribe to events of a class and its subclasses.

        Args:
            event_type: Event class, e.g. InvoiceReversed
            callback: Called with the event instance
        """
        self._subscribers.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: type[InvoicingEvent], callback: Handler) -> None:
        """Remove a handler. Unknown handlers are ignored."""
        handlers = self._subscribers.get(event_type, [])
        if callback in handlers:
            handlers.remove(callback)

    def publish(self, event: InvoicingEvent) -> None:
        """
        Deliver an event, most specific subscribers first.

        Args:
            event: InvoicingEvent instance to publish
        """
        for cls in type(event).__mro__:
            for callback in list(self._subscribers.get(cls, [])):
                try:
                    callback(event)
                except Exception:
                    logger.exception(
                        "Handler %s failed for %s (event_id=%s)",
                        getattr(callback, "__name__", repr(callback)),
                        type(event).__name__,
                        event.event_id,
                    )
