"""
events.py - Subscriber registry for state-change notifications

Transfer and Approval records are the token's observable audit trail. External
consumers (balance indexers, wallets, tests) subscribe a handler and receive
every notification after the operation that emitted it has committed.

Design:
- Handlers are plain functions: (event) -> None
- Delivery is synchronous, in subscription order, once per event
- A failing handler does not stop delivery to the others; failures are
  collected and raised together as one NotificationError afterwards
"""

from __future__ import annotations
from typing import Any, Callable, Iterable, List, Tuple

from .core import Event, NotificationError


EventHandler = Callable[[Event], None]


class EventBus:
    """Ordered list of handlers that receive every published notification."""

    def __init__(self):
        self._handlers: List[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> EventHandler:
        """
        Register a handler. Returns the handler so it can be used as a decorator.

        Raises:
            ValueError: If the handler is already subscribed.
        """
        if handler in self._handlers:
            raise ValueError(f"Handler {handler!r} already subscribed")
        self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove a handler. Raises ValueError if it was never subscribed."""
        if handler not in self._handlers:
            raise ValueError(f"Handler {handler!r} not subscribed")
        self._handlers.remove(handler)

    def publish(self, events: Iterable[Event], operation: Any = None) -> None:
        """
        Deliver each event to every handler.

        Raises:
            NotificationError: After delivery, if any handler raised.
        """
        failures: List[Tuple[EventHandler, Event, Exception]] = []
        for event in events:
            # Copy so a handler may unsubscribe itself during delivery
            for handler in list(self._handlers):
                try:
                    handler(event)
                except Exception as e:
                    failures.append((handler, event, e))
        if failures:
            raise NotificationError(failures, operation) from failures[0][2]

    def __len__(self) -> int:
        return len(self._handlers)
