# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Inbound event routing.

The router receives every frame read from the channel, keeps the
presence list up to date, decides whether the event concerns the signed
in user, raises the matching toast and hands the event to registered
handlers.

Recipient rules:
    ArticleAssigned      admin always; student only for their own id
    CommentAdded         admin always (no toast); student only for their own id
    ReportUploaded       admin only
    UserConnected        admin only, never about themselves
    UserDisconnected     admin only, never about themselves
    ArticleConsulted     admin only, never about themselves
    InitialConnectedUsers everyone

Presence maintenance runs for every inbound presence event regardless of
the recipient rules and of registered handlers.
"""

import logging
from typing import Callable

from src.infrastructure.events import (
    ArticleAssigned,
    ArticleConsulted,
    CommentAdded,
    DomainEvent,
    EventBus,
    EventHandler,
    EventType,
    InitialConnectedUsers,
    ReportUploaded,
    UserConnected,
    UserDisconnected,
)
from src.infrastructure.notifications import Notification, NotificationService
from src.infrastructure.realtime.exceptions import EventDecodeError
from src.infrastructure.realtime.presence import PresenceEntry, PresenceRegistry
from src.infrastructure.realtime.protocol import parse_event
from src.infrastructure.realtime.session import Identity

logger = logging.getLogger(__name__)

_ADMIN_ONLY_ABOUT_OTHERS = frozenset(
    {
        EventType.USER_CONNECTED,
        EventType.USER_DISCONNECTED,
        EventType.ARTICLE_CONSULTED,
    }
)


class EventRouter:
    """Dispatches inbound events for the current session.

    The router only delivers while attached to a live channel. Handler
    subscriptions outlive individual channels; attachment does not.

    Attributes:
        presence: Connected users as seen by this client.
    """

    def __init__(
        self,
        notifier: NotificationService,
        presence: PresenceRegistry | None = None,
        bus: EventBus | None = None,
    ) -> None:
        """Initialize the router.

        Args:
            notifier: Notification service used for toasts.
            presence: Presence registry to maintain.
            bus: Observer registry for interest handlers.
        """
        self.presence = presence or PresenceRegistry()
        self._notifier = notifier
        self._bus = bus or EventBus()
        self._identity: Identity | None = None

    @property
    def identity(self) -> Identity | None:
        """Identity the router filters for while attached."""
        return self._identity

    @property
    def is_attached(self) -> bool:
        return self._identity is not None

    def attach(self, identity: Identity) -> None:
        """Start delivering events for a newly connected channel."""
        self._identity = identity
        logger.debug("Event router attached for user %s", identity.user_id)

    def detach(self) -> None:
        """Stop delivering events. Presence is reset with the channel."""
        if self._identity is None:
            return
        logger.debug("Event router detached for user %s", self._identity.user_id)
        self._identity = None
        self.presence.clear()

    def subscribe(self, event_type: EventType, handler: EventHandler) -> Callable[[], bool]:
        """Register an interest handler.

        Args:
            event_type: Event type to react to.
            handler: Sync or async callable receiving the DomainEvent.

        Returns:
            Callable that removes the handler.
        """
        return self._bus.subscribe(event_type, handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> bool:
        return self._bus.unsubscribe(event_type, handler)

    async def handle_frame(self, raw: str | bytes) -> bool:
        """Decode and dispatch one raw frame. Malformed frames are dropped.

        Returns:
            True if the event reached the session's observers.
        """
        try:
            event = parse_event(raw)
        except EventDecodeError as e:
            logger.warning("Dropping inbound frame: %s", str(e))
            return False
        return await self.dispatch(event)

    async def dispatch(self, event: DomainEvent) -> bool:
        """Dispatch one inbound event.

        Args:
            event: Decoded event.

        Returns:
            True if the event reached the session's observers.
        """
        identity = self._identity
        if identity is None:
            logger.debug("Router detached, dropping event %s", event.event_type.value)
            return False

        logger.debug("Event received: %s", event.to_dict())

        self._update_presence(event)

        if not self.is_relevant(event, identity):
            logger.debug(
                "Event %s filtered out for user %s",
                event.event_type.value,
                identity.user_id,
            )
            return False

        notification = self._build_notification(event, identity)
        if notification is not None:
            self._notifier.notify(notification)

        await self._bus.publish(event)
        return True

    @staticmethod
    def is_relevant(event: DomainEvent, identity: Identity) -> bool:
        """Apply the recipient rules for one event and one identity."""
        payload = event.payload
        event_type = event.event_type

        if event_type is EventType.INITIAL_CONNECTED_USERS:
            return True

        if event_type in (EventType.ARTICLE_ASSIGNED, EventType.COMMENT_ADDED):
            if identity.is_admin:
                return True
            return identity.is_student and payload.student_id == identity.user_id

        if event_type is EventType.REPORT_UPLOADED:
            return identity.is_admin

        if event_type in _ADMIN_ONLY_ABOUT_OTHERS:
            return identity.is_admin and payload.user_id != identity.user_id

        return False

    def _update_presence(self, event: DomainEvent) -> None:
        payload = event.payload
        if isinstance(payload, UserConnected):
            self.presence.upsert(PresenceEntry(payload.user_id, payload.user_name))
        elif isinstance(payload, UserDisconnected):
            self.presence.remove(payload.user_id)
        elif isinstance(payload, InitialConnectedUsers):
            self.presence.replace_all(
                PresenceEntry(user.user_id, user.user_name) for user in payload.users
            )

    @staticmethod
    def _build_notification(event: DomainEvent, identity: Identity) -> Notification | None:
        """Toast for a relevant event, or None when the event is silent."""
        payload = event.payload
        notification_type = event.event_type.value
        data = payload.to_wire()

        if isinstance(payload, ArticleAssigned):
            if identity.is_student:
                return Notification(
                    title="New Article Assigned",
                    description=f'Professor assigned you the article: "{payload.article_title}"',
                    notification_type=notification_type,
                    data=data,
                )
            return Notification(
                title="Article Assigned",
                description=(
                    f'Article "{payload.article_title}" assigned to student ID {payload.student_id}.'
                ),
                notification_type=notification_type,
                data=data,
            )

        if isinstance(payload, CommentAdded):
            # Admins only log comments on the dashboard
            if identity.is_admin:
                return None
            return Notification(
                title="New Comment",
                description=(
                    f"Professor added a comment on your report for article ID {payload.article_id}."
                ),
                notification_type=notification_type,
                data=data,
            )

        if isinstance(payload, ReportUploaded):
            return Notification(
                title="Report Uploaded",
                description=(
                    f'{payload.student_name} uploaded a report: "{payload.report_title}" '
                    f"for article ID {payload.article_id}."
                ),
                notification_type=notification_type,
                data=data,
            )

        if isinstance(payload, UserConnected):
            return Notification(
                description=f"{payload.user_name} connected.",
                notification_type=notification_type,
                data=data,
            )

        if isinstance(payload, UserDisconnected):
            return Notification(
                description=f"{payload.user_name} disconnected.",
                notification_type=notification_type,
                data=data,
            )

        if isinstance(payload, ArticleConsulted):
            return Notification(
                description=f'{payload.user_name} is viewing article: "{payload.article_title}".',
                notification_type=notification_type,
                data=data,
            )

        return None
