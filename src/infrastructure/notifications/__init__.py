# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification System for the ScholarSync client.

User-visible messages ("toasts") raised by the real-time event layer
and the data collaborators are delivered through one or more channels:
- In-app notifications (kept in memory for the UI shell)
- Console notifications (rich panels for terminal front-ends)

Account emails (student credentials) go through SmtpMailer instead.

Key Components:
- NotificationService: Fans notifications out to channels
- Notification: Data structure for notification content

Usage:
    from src.infrastructure.notifications import NotificationService

    notifier = NotificationService()
    notifier.warning(
        "Could not send update. Please check your connection.",
        title="Real-time Action Failed",
    )
"""

from src.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    ConsoleChannel,
    DeliveryStatus,
    InAppChannel,
    Notification,
    NotificationVariant,
)
from src.infrastructure.notifications.email import EmailMessage, MailDeliveryError, SmtpMailer
from src.infrastructure.notifications.service import NotificationService

__all__ = [
    # Service
    "NotificationService",
    # Channels
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "ConsoleChannel",
    "DeliveryStatus",
    "InAppChannel",
    "Notification",
    "NotificationVariant",
    # Email
    "EmailMessage",
    "MailDeliveryError",
    "SmtpMailer",
]
