# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-app notification channel.

Keeps the most recent notifications in memory so the UI shell can render
them as toasts and a notification center. This is the primary channel.
"""

from collections import deque
from typing import Callable

from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    Notification,
)

ToastListener = Callable[[Notification], None]


class InAppChannel(BaseChannel):
    """In-app toast channel.

    Stores notifications newest-first in a bounded buffer and forwards
    each one to registered listeners (view code that displays toasts).
    """

    DEFAULT_CAPACITY = 50

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        """Initialize the in-app channel.

        Args:
            capacity: Number of notifications kept for the notification center.
        """
        super().__init__()
        self._toasts: deque[Notification] = deque(maxlen=capacity)
        self._listeners: list[ToastListener] = []

    @property
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        return ChannelType.IN_APP

    @property
    def toasts(self) -> list[Notification]:
        """Notifications currently held, newest first."""
        return list(self._toasts)

    def add_listener(self, listener: ToastListener) -> Callable[[], None]:
        """Register a display callback.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def send(self, notification: Notification) -> ChannelResult:
        """Store the notification and hand it to display listeners.

        Args:
            notification: The notification.

        Returns:
            ChannelResult with delivery status.
        """
        self._toasts.appendleft(notification)

        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception as e:
                self.logger.error(
                    "Toast listener failed for notification %s: %s",
                    notification.notification_id,
                    str(e),
                    exc_info=True,
                )
                return self.create_failure_result(f"Listener error: {str(e)}")

        return self.create_success_result(message_id=notification.notification_id)

    def dismiss(self, notification_id: str) -> bool:
        """Remove a notification from the center.

        Returns:
            True if the notification was present.
        """
        for toast in self._toasts:
            if toast.notification_id == notification_id:
                self._toasts.remove(toast)
                return True
        return False

    def clear(self) -> None:
        """Remove all held notifications."""
        self._toasts.clear()
