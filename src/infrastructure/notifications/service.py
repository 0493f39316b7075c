# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification service for orchestrating notification delivery.

The event layer and the data collaborators raise user-visible messages
through this service, which fans each notification out to every
configured channel. Channel failures are logged and never propagate.
"""

import logging
from typing import Any

from src.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    DeliveryStatus,
    InAppChannel,
    Notification,
    NotificationVariant,
)

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for raising notifications.

    Attributes:
        channels: Channels every notification is delivered to.
    """

    def __init__(self, channels: list[BaseChannel] | None = None) -> None:
        """Initialize the notification service.

        Args:
            channels: Delivery channels. Defaults to a single InAppChannel.
        """
        self.channels: list[BaseChannel] = channels if channels is not None else [InAppChannel()]
        logger.info("NotificationService initialized with %d channels", len(self.channels))

    @property
    def in_app(self) -> InAppChannel | None:
        """The first in-app channel, if configured."""
        for channel in self.channels:
            if isinstance(channel, InAppChannel):
                return channel
        return None

    def notify(self, notification: Notification) -> list[ChannelResult]:
        """Deliver a notification through all channels.

        Args:
            notification: Notification to deliver.

        Returns:
            One result per channel.
        """
        results: list[ChannelResult] = []
        for channel in self.channels:
            try:
                result = channel.send(notification)
            except Exception as e:
                logger.error(
                    "Channel %s failed for notification %s: %s",
                    channel.channel_type.value,
                    notification.notification_id,
                    str(e),
                    exc_info=True,
                )
                result = channel.create_failure_result(str(e))
            if result.status == DeliveryStatus.FAILED:
                logger.warning(
                    "Notification %s not delivered via %s: %s",
                    notification.notification_id,
                    result.channel.value,
                    result.error_message,
                )
            results.append(result)

        logger.debug("Notification raised: %s", notification.text)
        return results

    def info(
        self,
        description: str,
        title: str | None = None,
        notification_type: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> Notification:
        """Raise a default notification."""
        return self._raise(NotificationVariant.DEFAULT, description, title, notification_type, data)

    def warning(
        self,
        description: str,
        title: str | None = None,
        notification_type: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> Notification:
        """Raise a warning notification."""
        return self._raise(NotificationVariant.WARNING, description, title, notification_type, data)

    def error(
        self,
        description: str,
        title: str | None = None,
        notification_type: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> Notification:
        """Raise a destructive notification."""
        return self._raise(NotificationVariant.DESTRUCTIVE, description, title, notification_type, data)

    def _raise(
        self,
        variant: NotificationVariant,
        description: str,
        title: str | None,
        notification_type: str | None,
        data: dict[str, Any] | None,
    ) -> Notification:
        notification = Notification(
            description=description,
            title=title,
            variant=variant,
            notification_type=notification_type,
            data=data or {},
        )
        self.notify(notification)
        return notification
