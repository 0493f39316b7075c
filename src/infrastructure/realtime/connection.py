# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Connection manager for the event channel.

Owns the single channel to the messaging backend for the current
session. The channel is opened when a session starts and closed when it
ends; at most one channel is live per process.

State machine:
    disconnected -> connecting -> connected -> disconnected
    connecting / connected -> error    (transport failure)
    error -> disconnected              (close() or the next open())

There is no automatic reconnection. After an error the only recovery
path is a new open(), typically triggered by the next session change.

Example:
    manager = ConnectionManager(lambda: WebSocketTransport(settings), router, notifier)
    manager.bind(session_state)
    await session_state.set_session(identity, token)  # opens the channel
"""

import asyncio
import inspect
import logging
from enum import Enum
from typing import Awaitable, Callable

from src.infrastructure.events import EventType
from src.infrastructure.notifications import NotificationService
from src.infrastructure.realtime.exceptions import (
    ChannelClosedError,
    HandshakeRejectedError,
    RealtimeError,
)
from src.infrastructure.realtime.protocol import build_handshake, encode_frame
from src.infrastructure.realtime.router import EventRouter
from src.infrastructure.realtime.session import Session, SessionState
from src.infrastructure.realtime.transport import Transport
from src.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

TransportFactory = Callable[[], Transport]
StatusListener = Callable[["ConnectionStatus"], Awaitable[None] | None]


class ConnectionStatus(str, Enum):
    """Channel connection status."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class ConnectionManager:
    """Opens, watches and closes the event channel.

    Attributes:
        router: Router the channel's inbound frames are delivered to.
    """

    def __init__(
        self,
        transport_factory: TransportFactory,
        router: EventRouter,
        notifier: NotificationService,
    ) -> None:
        """Initialize the connection manager.

        Args:
            transport_factory: Builds a fresh transport for each channel.
            router: Inbound event router.
            notifier: Notification service for connection failures.
        """
        self.router = router
        self._transport_factory = transport_factory
        self._notifier = notifier
        self._transport: Transport | None = None
        self._reader: asyncio.Task | None = None
        self._status = ConnectionStatus.DISCONNECTED
        self._channel_id: str | None = None
        self._session: Session | None = None
        self._status_listeners: list[StatusListener] = []
        # Bumped by every open/close so stale readers and handshakes stand down
        self._generation = 0
        # Log context is bound in the task that called open(); the reader task
        # only holds a copy, so it is cleared by the next open() or close().
        self._context_bound = False

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def is_connected(self) -> bool:
        return self._status is ConnectionStatus.CONNECTED

    @property
    def channel_id(self) -> str | None:
        """Backend-assigned channel id, present only while connected."""
        return self._channel_id if self.is_connected else None

    @property
    def session(self) -> Session | None:
        """Session the live channel was opened for."""
        return self._session

    def bind(self, session_state: SessionState) -> Callable[[], None]:
        """Follow session transitions: open on session start, close on end.

        Returns:
            Callable that stops following the session.
        """
        return session_state.add_listener(self._on_session_change)

    def on_status_change(self, listener: StatusListener) -> Callable[[], None]:
        """Register a callback invoked on every status transition.

        Returns:
            Callable that removes the listener.
        """
        self._status_listeners.append(listener)

        def remove() -> None:
            if listener in self._status_listeners:
                self._status_listeners.remove(listener)

        return remove

    async def open(self, session: Session | None) -> bool:
        """Open a channel authenticated as the session's user.

        Any previous channel is closed first. Failures are reported to the
        user and leave the manager in the error state; they never raise.

        Args:
            session: Active session. Nothing is opened without one.

        Returns:
            True if the channel is connected.
        """
        await self.close()

        if session is None:
            logger.warning("Refusing to open channel without a session")
            return False

        self._generation += 1
        generation = self._generation
        await self._set_status(ConnectionStatus.CONNECTING)

        transport: Transport | None = None
        try:
            transport = self._transport_factory()
            channel_id = await transport.connect(build_handshake(session.token, session.user_id))
        except HandshakeRejectedError as e:
            logger.error("Channel handshake rejected: %s", e.reason or str(e))
            return await self._fail_open(transport, generation, e)
        except RealtimeError as e:
            logger.error("WebSocket connection error: %s", str(e))
            return await self._fail_open(transport, generation, e)
        except Exception as e:
            logger.error("Unexpected error opening channel: %s", str(e), exc_info=True)
            return await self._fail_open(transport, generation, e)

        if generation != self._generation:
            # close() or another open() ran while the handshake was pending
            logger.debug("Discarding channel %s opened for a stale session", channel_id)
            await self._abandon(transport)
            return False

        self._transport = transport
        self._channel_id = channel_id
        self._session = session
        self.router.attach(session.identity)
        bind_context(user_id=session.user_id, channel_id=channel_id)
        self._context_bound = True
        logger.info("WebSocket connected: %s", channel_id)

        self._reader = asyncio.create_task(
            self._read_loop(transport, generation),
            name=f"channel-reader-{channel_id}",
        )
        await self._set_status(ConnectionStatus.CONNECTED)

        # Presence snapshot; the reply replaces any cached list
        try:
            await transport.send(encode_frame(EventType.GET_CONNECTED_USERS))
        except RealtimeError as e:
            logger.warning("Could not request connected users: %s", str(e))

        return True

    async def close(self) -> None:
        """Close the channel and detach all listeners. Idempotent."""
        self._generation += 1

        reader, self._reader = self._reader, None
        if reader is not None and reader is not asyncio.current_task():
            reader.cancel()
            await asyncio.gather(reader, return_exceptions=True)

        self.router.detach()

        transport, self._transport = self._transport, None
        if transport is not None:
            await self._abandon(transport)
            logger.info("Disconnecting WebSocket...")

        self._channel_id = None
        self._session = None
        if self._context_bound:
            clear_context()
            self._context_bound = False
        if self._status is not ConnectionStatus.DISCONNECTED:
            await self._set_status(ConnectionStatus.DISCONNECTED)

    async def send(self, frame: str) -> None:
        """Send an encoded frame on the live channel.

        Raises:
            ChannelClosedError: If no channel is connected.
        """
        if not self.is_connected or self._transport is None:
            raise ChannelClosedError("Channel is not connected")
        await self._transport.send(frame)

    async def _on_session_change(self, session: Session | None) -> None:
        if session is None:
            await self.close()
        else:
            await self.open(session)

    async def _read_loop(self, transport: Transport, generation: int) -> None:
        """Deliver inbound frames to the router in arrival order."""
        try:
            while True:
                raw = await transport.receive()
                if generation != self._generation:
                    return
                await self.router.handle_frame(raw)
        except asyncio.CancelledError:
            raise
        except ChannelClosedError as e:
            if generation != self._generation:
                return
            if e.clean:
                logger.info("WebSocket disconnected: %s", str(e))
                await self._lose_channel(None)
            else:
                logger.error("WebSocket connection lost: %s", str(e))
                await self._lose_channel(e)
        except RealtimeError as e:
            if generation == self._generation:
                logger.error("WebSocket transport error: %s", str(e))
                await self._lose_channel(e)
        except Exception as e:
            if generation == self._generation:
                logger.error("Unexpected error reading channel: %s", str(e), exc_info=True)
                await self._lose_channel(e)

    async def _lose_channel(self, error: Exception | None) -> None:
        """Tear down after the backend closed or the transport failed."""
        self._generation += 1
        self._reader = None
        self.router.detach()

        transport, self._transport = self._transport, None
        if transport is not None:
            await self._abandon(transport)

        self._channel_id = None
        self._session = None

        if error is None:
            await self._set_status(ConnectionStatus.DISCONNECTED)
        else:
            await self._fail(error)

    async def _fail_open(
        self,
        transport: Transport | None,
        generation: int,
        error: Exception,
    ) -> bool:
        if transport is not None:
            await self._abandon(transport)
        if generation == self._generation:
            await self._fail(error)
        return False

    async def _fail(self, error: Exception) -> None:
        await self._set_status(ConnectionStatus.ERROR)
        self._notifier.error(
            "Could not connect to real-time server.",
            title="Connection Error",
            notification_type="connection_error",
            data={"error": str(error)},
        )

    @staticmethod
    async def _abandon(transport: Transport) -> None:
        try:
            await transport.close()
        except Exception as e:
            logger.debug("Ignoring error while closing transport: %s", str(e))

    async def _set_status(self, status: ConnectionStatus) -> None:
        if status is self._status:
            return
        logger.debug("Connection status %s -> %s", self._status.value, status.value)
        self._status = status
        for listener in list(self._status_listeners):
            try:
                result = listener(status)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("Status listener failed: %s", str(e), exc_info=True)
