# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Custom exceptions for the real-time event layer.

This module defines the exception hierarchy for channel operations:
- RealtimeError: Base exception for all event layer errors
- ChannelConnectionError: Transport could not be opened or failed
- HandshakeRejectedError: Backend refused the authentication handshake
- ChannelClosedError: Channel closed while reading or sending
- EventDecodeError: Inbound frame could not be decoded

None of these escape the connection manager or the emitter; they are
converted to user notifications at that boundary.
"""


class RealtimeError(Exception):
    """Base exception for all real-time event layer errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict | None = None):
        """Initialize realtime error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ChannelConnectionError(RealtimeError):
    """Transport-level failure while opening or using the channel."""


class HandshakeRejectedError(ChannelConnectionError):
    """The messaging backend rejected the {token, userId} handshake.

    Attributes:
        reason: Rejection detail sent by the backend, if any.
    """

    def __init__(self, message: str, reason: str | None = None, details: dict | None = None):
        self.reason = reason
        super().__init__(message, details)


class ChannelClosedError(RealtimeError):
    """The channel is closed.

    Attributes:
        clean: True when the close handshake completed normally.
        code: Close code reported by the transport, if any.
    """

    def __init__(
        self,
        message: str = "Channel is closed",
        clean: bool = True,
        code: int | None = None,
        details: dict | None = None,
    ):
        self.clean = clean
        self.code = code
        super().__init__(message, details)


class EventDecodeError(RealtimeError):
    """An inbound frame is not valid JSON or has an unknown shape."""
