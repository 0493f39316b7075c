# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Base classes for notification channels.

This module defines the abstract base class and shared types for all
notification channels. A notification is the client-side "toast": a
short, non-blocking message raised by the event layer (inbound events,
connection failures, dropped emits) or by UI collaborators.

Channel implementations are synchronous: raising a notification never
blocks the event loop and never raises into the caller.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from src.utils.datetime import utc_now


class ChannelType(str, Enum):
    """Available notification channel types."""

    IN_APP = "in_app"
    CONSOLE = "console"


class NotificationVariant(str, Enum):
    """Visual weight of a notification."""

    DEFAULT = "default"
    WARNING = "warning"
    DESTRUCTIVE = "destructive"


class DeliveryStatus(str, Enum):
    """Delivery status for a channel."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Notification:
    """A user-visible notification.

    Attributes:
        description: Notification body.
        title: Optional heading.
        variant: Visual weight.
        notification_type: Machine-readable kind (event type or error kind).
        data: Additional data for UI handlers.
        notification_id: Unique identifier.
        created_at: When the notification was raised.
    """

    description: str
    title: str | None = None
    variant: NotificationVariant = NotificationVariant.DEFAULT
    notification_type: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    notification_id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utc_now)

    @property
    def text(self) -> str:
        """Title and description joined for plain-text rendering."""
        if self.title:
            return f"{self.title}: {self.description}"
        return self.description


@dataclass
class ChannelResult:
    """Result of a channel send operation.

    Attributes:
        channel: Which channel was used.
        status: Delivery status.
        message_id: Identifier of the delivered notification.
        error_message: Error message if failed.
        sent_at: When message was sent.
    """

    channel: ChannelType
    status: DeliveryStatus
    message_id: str | None = None
    error_message: str | None = None
    sent_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "channel": self.channel.value,
            "status": self.status.value,
            "message_id": self.message_id,
            "error_message": self.error_message,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
        }


class BaseChannel(ABC):
    """Abstract base class for notification channels.

    Attributes:
        channel_type: The type of this channel.
    """

    def __init__(self) -> None:
        """Initialize the channel."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        ...

    @abstractmethod
    def send(self, notification: Notification) -> ChannelResult:
        """Deliver a notification through this channel.

        Args:
            notification: The notification to deliver.

        Returns:
            ChannelResult with delivery status.
        """
        ...

    def create_success_result(self, message_id: str | None = None) -> ChannelResult:
        """Create a successful channel result.

        Args:
            message_id: Identifier of the delivered notification.

        Returns:
            ChannelResult with SENT status.
        """
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.SENT,
            message_id=message_id,
            sent_at=utc_now(),
        )

    def create_failure_result(self, error_message: str) -> ChannelResult:
        """Create a failed channel result.

        Args:
            error_message: Error description.

        Returns:
            ChannelResult with FAILED status.
        """
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.FAILED,
            error_message=error_message,
            sent_at=utc_now(),
        )

    def create_skipped_result(self, reason: str) -> ChannelResult:
        """Create a skipped channel result.

        Args:
            reason: Why the send was skipped.

        Returns:
            ChannelResult with SKIPPED status.
        """
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.SKIPPED,
            error_message=reason,
            sent_at=utc_now(),
        )
