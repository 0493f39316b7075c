# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Outbound event publishing.

Domain events are fire-and-forget. When the channel is not connected the
event is dropped and the user is warned; there is no outbound queue and
no retry. Payloads are not validated here: callers build them with the
payload models or as plain mappings in wire format.
"""

import logging
from collections.abc import Mapping
from typing import Any

from src.infrastructure.events import EventPayload, EventRegistry, EventType, GetConnectedUsers
from src.infrastructure.notifications import NotificationService
from src.infrastructure.realtime.connection import ConnectionManager
from src.infrastructure.realtime.exceptions import RealtimeError
from src.infrastructure.realtime.protocol import encode_frame

logger = logging.getLogger(__name__)


class OutboundEmitter:
    """Publishes domain events triggered by user actions."""

    def __init__(self, connection: ConnectionManager, notifier: NotificationService) -> None:
        """Initialize the emitter.

        Args:
            connection: Connection manager owning the channel.
            notifier: Notification service for dropped events.
        """
        self._connection = connection
        self._notifier = notifier

    async def emit(
        self,
        event_type: EventType | str,
        payload: EventPayload | Mapping[str, Any] | None = None,
    ) -> bool:
        """Publish an event on the channel.

        Never raises. If the channel is not connected, or the send fails,
        the event is dropped and a single warning notification is raised.

        Args:
            event_type: Event type to publish.
            payload: Typed payload model or wire-format mapping.

        Returns:
            True if the event was handed to the transport.
        """
        name = event_type.value if isinstance(event_type, EventType) else str(event_type)
        if isinstance(event_type, EventType) and not EventRegistry.is_outbound(event_type):
            logger.debug("Emitting server-originated event type: %s", name)

        if not self._connection.is_connected:
            logger.warning("WebSocket not connected, cannot emit event: %s", name)
            self._warn_dropped(name)
            return False

        wire_payload = payload.to_wire() if isinstance(payload, EventPayload) else payload
        if isinstance(wire_payload, Mapping):
            wire_payload = dict(wire_payload)

        try:
            await self._connection.send(encode_frame(name, wire_payload))
        except (RealtimeError, TypeError, ValueError) as e:
            logger.warning("Failed to emit event %s: %s", name, str(e))
            self._warn_dropped(name)
            return False

        logger.info("Emitting event: %s %s", name, wire_payload)
        return True

    async def publish(self, payload: EventPayload) -> bool:
        """Publish a typed payload under its own event type."""
        return await self.emit(payload.event_type, payload)

    async def request_connected_users(self) -> bool:
        """Ask the backend for a fresh InitialConnectedUsers reply."""
        return await self.publish(GetConnectedUsers())

    def _warn_dropped(self, name: str) -> None:
        self._notifier.warning(
            "Could not send update. Please check your connection.",
            title="Real-time Action Failed",
            notification_type="emit_dropped",
            data={"event": name},
        )
