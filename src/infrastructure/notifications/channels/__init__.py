# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification channels for delivering notifications.

- InAppChannel: Keeps toasts in memory for the UI shell
- ConsoleChannel: Renders toasts in a terminal with rich

Usage:
    from src.infrastructure.notifications.channels import (
        InAppChannel,
        Notification,
    )

    in_app = InAppChannel()
    in_app.send(Notification(title="Report Uploaded", description="..."))
"""

from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    Notification,
    NotificationVariant,
)
from src.infrastructure.notifications.channels.console import ConsoleChannel
from src.infrastructure.notifications.channels.in_app import InAppChannel

__all__ = [
    # Base types
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "Notification",
    "NotificationVariant",
    # Channels
    "ConsoleChannel",
    "InAppChannel",
]
