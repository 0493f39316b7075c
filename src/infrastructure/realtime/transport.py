# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Bidirectional channel transport.

The connection manager talks to the messaging backend through the
Transport interface. WebSocketTransport is the production implementation
built on the websockets asyncio client; tests substitute an in-memory
transport.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from src.core.config.settings import RealtimeSettings
from src.infrastructure.realtime.exceptions import (
    ChannelClosedError,
    ChannelConnectionError,
    EventDecodeError,
    HandshakeRejectedError,
)
from src.infrastructure.realtime.protocol import parse_handshake_reply

logger = logging.getLogger(__name__)


class Transport(ABC):
    """One channel instance. Not reusable after close()."""

    @abstractmethod
    async def connect(self, handshake: str) -> str:
        """Open the channel and perform the authentication handshake.

        Args:
            handshake: Encoded authentication frame.

        Returns:
            Backend-assigned channel id.

        Raises:
            HandshakeRejectedError: If the backend refused the credentials.
            ChannelConnectionError: On any transport failure.
        """
        ...

    @abstractmethod
    async def send(self, frame: str) -> None:
        """Send one text frame without waiting for any reply.

        Raises:
            ChannelClosedError: If the channel is closed.
        """
        ...

    @abstractmethod
    async def receive(self) -> str | bytes:
        """Wait for the next inbound frame.

        Raises:
            ChannelClosedError: When the channel closes.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the channel. Idempotent."""
        ...


class WebSocketTransport(Transport):
    """Transport over a WebSocket connection to the messaging backend."""

    def __init__(self, settings: RealtimeSettings | None = None) -> None:
        """Initialize the transport.

        Args:
            settings: Realtime settings (URL and timeouts).
        """
        self._settings = settings or RealtimeSettings()
        self._ws: ClientConnection | None = None

    @property
    def url(self) -> str:
        return self._settings.url

    async def connect(self, handshake: str) -> str:
        logger.debug("Connecting to %s", self.url)
        try:
            self._ws = await connect(
                self.url,
                open_timeout=self._settings.open_timeout,
                ping_interval=self._settings.ping_interval,
                close_timeout=self._settings.close_timeout,
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            raise ChannelConnectionError(
                "Could not open channel",
                {"url": self.url, "error": str(e)},
            ) from e

        try:
            await self._ws.send(handshake)
            reply = await asyncio.wait_for(
                self._ws.recv(),
                timeout=self._settings.handshake_timeout,
            )
            return parse_handshake_reply(reply)
        except HandshakeRejectedError:
            await self.close()
            raise
        except EventDecodeError as e:
            await self.close()
            raise ChannelConnectionError("Invalid handshake reply", e.details) from e
        except (asyncio.TimeoutError, WebSocketException) as e:
            await self.close()
            raise ChannelConnectionError(
                "Handshake failed",
                {"url": self.url, "error": str(e)},
            ) from e

    async def send(self, frame: str) -> None:
        if self._ws is None:
            raise ChannelClosedError("Channel is not open")
        try:
            await self._ws.send(frame)
        except ConnectionClosed as e:
            raise self._closed_error(e) from e

    async def receive(self) -> str | bytes:
        if self._ws is None:
            raise ChannelClosedError("Channel is not open")
        try:
            return await self._ws.recv()
        except ConnectionClosed as e:
            raise self._closed_error(e) from e

    async def close(self) -> None:
        ws, self._ws = self._ws, None
        if ws is None:
            return
        try:
            await ws.close()
        except (OSError, WebSocketException) as e:
            logger.debug("Error while closing channel: %s", str(e))

    @staticmethod
    def _closed_error(exc: ConnectionClosed) -> ChannelClosedError:
        code = exc.rcvd.code if exc.rcvd is not None else None
        return ChannelClosedError(
            "Channel closed by backend",
            clean=isinstance(exc, ConnectionClosedOK),
            code=code,
        )
