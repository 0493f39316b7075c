# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-process event bus for inbound channel events.

Handlers subscribe to one EventType and receive the DomainEvent wrapper
holding the typed payload. The bus is the observer half of the event
router: the router decides whether an event is relevant to the current
session, then publishes it here.

The EventBus supports:
- Typed subscriptions keyed by EventType
- Sync and async handlers
- Multiple handlers per event type

Example:
    from src.infrastructure.events import EventBus, EventType

    bus = EventBus()

    async def on_assigned(event):
        print(event.payload.article_title)

    unsubscribe = bus.subscribe(EventType.ARTICLE_ASSIGNED, on_assigned)
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable
from uuid import uuid4

from src.infrastructure.events.types import EventPayload, EventType
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

# Handlers may be plain functions or coroutines
EventHandler = Callable[["DomainEvent"], Awaitable[None] | None]


@dataclass
class DomainEvent:
    """Container for an event with metadata.

    Attributes:
        event_type: The event type.
        payload: The typed event payload.
        event_id: Client-side identifier, used for log correlation only.
        timestamp: When the event was received or created locally.
    """

    event_type: EventType
    payload: EventPayload
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type.value,
            "payload": self.payload.to_wire(),
            "timestamp": self.timestamp.isoformat(),
        }


class EventBus:
    """In-memory event bus with typed subscriptions.

    Thread-safety: designed for single-threaded async use. All handlers
    for one event complete before publish() returns, so events published
    in sequence are handled in sequence.

    Attributes:
        _handlers: Dictionary mapping event types to handler lists.
    """

    def __init__(self) -> None:
        """Initialize the event bus."""
        self._handlers: dict[EventType, list[EventHandler]] = {}
        logger.debug("EventBus initialized")

    def subscribe(
        self,
        event_type: EventType,
        handler: EventHandler,
    ) -> Callable[[], bool]:
        """Subscribe a handler to an event type.

        Args:
            event_type: Event type to listen for.
            handler: Function or coroutine function receiving the DomainEvent.

        Returns:
            Callable that removes this subscription.
        """
        event_type = EventType(event_type)
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug("Subscribed handler to: %s", event_type.value)

        def unsubscribe() -> bool:
            return self.unsubscribe(event_type, handler)

        return unsubscribe

    def unsubscribe(
        self,
        event_type: EventType,
        handler: EventHandler,
    ) -> bool:
        """Unsubscribe a handler from an event type.

        Args:
            event_type: Event type.
            handler: The handler function to remove.

        Returns:
            True if handler was found and removed, False otherwise.
        """
        handlers = self._handlers.get(EventType(event_type))
        if not handlers:
            return False
        try:
            handlers.remove(handler)
        except ValueError:
            return False
        if not handlers:
            del self._handlers[EventType(event_type)]
        return True

    async def publish(self, event: DomainEvent) -> int:
        """Deliver an event to every handler subscribed to its type.

        Handlers are called concurrently using asyncio.gather. Errors in
        individual handlers are logged but don't stop other handlers
        from executing.

        Args:
            event: Event to deliver.

        Returns:
            Number of handlers invoked.
        """
        # Snapshot so handlers may unsubscribe while running
        handlers_to_call = list(self._handlers.get(event.event_type, ()))

        if not handlers_to_call:
            logger.debug("No handlers for event: %s", event.event_type.value)
            return 0

        logger.debug(
            "Publishing event %s to %d handlers",
            event.event_type.value,
            len(handlers_to_call),
        )

        async def safe_call(handler: EventHandler) -> None:
            """Call handler with error handling."""
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    "Handler error for event %s: %s",
                    event.event_type.value,
                    str(e),
                    exc_info=True,
                )

        await asyncio.gather(
            *[safe_call(handler) for handler in handlers_to_call],
            return_exceptions=True,
        )

        return len(handlers_to_call)

    def handler_count(self, event_type: EventType | None = None) -> int:
        """Count registered handlers, optionally for one event type."""
        if event_type is not None:
            return len(self._handlers.get(EventType(event_type), ()))
        return sum(len(h) for h in self._handlers.values())

    def clear(self) -> None:
        """Remove all subscriptions."""
        self._handlers.clear()
        logger.debug("EventBus cleared all subscriptions")
