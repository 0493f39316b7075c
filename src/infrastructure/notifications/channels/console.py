# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Console notification channel.

Renders notifications as rich panels for terminal front-ends.
"""

from rich.console import Console
from rich.panel import Panel

from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    Notification,
    NotificationVariant,
)

_VARIANT_STYLES = {
    NotificationVariant.DEFAULT: "cyan",
    NotificationVariant.WARNING: "yellow",
    NotificationVariant.DESTRUCTIVE: "red",
}


class ConsoleChannel(BaseChannel):
    """Print notifications to a terminal."""

    def __init__(self, console: Console | None = None) -> None:
        super().__init__()
        self._console = console or Console(stderr=True)

    @property
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        return ChannelType.CONSOLE

    def send(self, notification: Notification) -> ChannelResult:
        style = _VARIANT_STYLES.get(notification.variant, "cyan")
        try:
            self._console.print(
                Panel(
                    notification.description,
                    title=notification.title,
                    border_style=style,
                    expand=False,
                )
            )
        except Exception as e:
            self.logger.error("Failed to render notification: %s", str(e), exc_info=True)
            return self.create_failure_result(f"Render error: {str(e)}")
        return self.create_success_result(message_id=notification.notification_id)
