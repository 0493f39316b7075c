# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Composition root for the real-time layer.

Builds the session state, connection manager, event router and outbound
emitter once per process and wires them together. UI code receives the
RealtimeClient (or its parts) by reference instead of reaching for
module-level singletons.

Example:
    client = RealtimeClient.create(verifier=AuthService.with_demo_accounts())
    async with client:
        client.subscribe(EventType.ARTICLE_ASSIGNED, refresh_articles)
        await client.login(identity, token)
"""

import logging
from typing import Callable

from src.core.config.settings import Settings, get_settings
from src.infrastructure.events import EventHandler, EventPayload, EventType
from src.infrastructure.notifications import NotificationService
from src.infrastructure.realtime.activity import ActivityFeed
from src.infrastructure.realtime.connection import (
    ConnectionManager,
    ConnectionStatus,
    TransportFactory,
)
from src.infrastructure.realtime.emitter import OutboundEmitter
from src.infrastructure.realtime.navigation import HistoryNavigator, Navigator
from src.infrastructure.realtime.presence import PresenceEntry
from src.infrastructure.realtime.router import EventRouter
from src.infrastructure.realtime.session import Identity, SessionState, TokenVerifier
from src.infrastructure.realtime.storage import FileTokenStore, TokenStore
from src.infrastructure.realtime.transport import WebSocketTransport

logger = logging.getLogger(__name__)


class RealtimeClient:
    """Session, channel, router and emitter for one process.

    Attributes:
        session: Session state.
        connection: Connection manager, bound to the session.
        router: Inbound event router.
        emitter: Outbound emitter.
        notifier: Notification service shared by all parts.
    """

    def __init__(
        self,
        session: SessionState,
        connection: ConnectionManager,
        router: EventRouter,
        emitter: OutboundEmitter,
        notifier: NotificationService,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.session = session
        self.connection = connection
        self.router = router
        self.emitter = emitter
        self.notifier = notifier
        self._unbind: Callable[[], None] | None = None

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        *,
        verifier: TokenVerifier | None = None,
        notifier: NotificationService | None = None,
        navigator: Navigator | None = None,
        token_store: TokenStore | None = None,
        transport_factory: TransportFactory | None = None,
    ) -> "RealtimeClient":
        """Build a fully wired client.

        Args:
            settings: Application settings (defaults to get_settings()).
            verifier: Token verification collaborator for session restore.
            notifier: Notification service (defaults to in-app toasts).
            navigator: Routing collaborator (defaults to an in-memory one).
            token_store: Credential storage (defaults to the settings file).
            transport_factory: Channel transport builder (defaults to WebSocket).

        Returns:
            RealtimeClient with the connection bound to the session.
        """
        settings = settings or get_settings()
        notifier = notifier or NotificationService()
        navigator = navigator or HistoryNavigator()
        token_store = token_store or FileTokenStore(
            settings.session.storage_path,
            key=settings.session.storage_key,
        )
        if transport_factory is None:
            realtime_settings = settings.realtime

            def transport_factory() -> WebSocketTransport:
                return WebSocketTransport(realtime_settings)

        session = SessionState(
            token_store=token_store,
            navigator=navigator,
            settings=settings.session,
            verifier=verifier,
        )
        router = EventRouter(notifier=notifier)
        connection = ConnectionManager(transport_factory, router, notifier)
        emitter = OutboundEmitter(connection, notifier)

        client = cls(session, connection, router, emitter, notifier, settings)
        client._unbind = connection.bind(session)
        return client

    @property
    def status(self) -> ConnectionStatus:
        return self.connection.status

    @property
    def is_connected(self) -> bool:
        return self.connection.is_connected

    @property
    def presence(self) -> list[PresenceEntry]:
        """Snapshot of the connected users."""
        return self.router.presence.snapshot()

    async def start(self) -> Identity | None:
        """Restore the persisted session; the channel opens if it is valid."""
        identity = await self.session.restore()
        if identity is None:
            logger.info("Starting without an authenticated session")
        return identity

    async def stop(self) -> None:
        """Close the channel without ending the session."""
        await self.connection.close()

    async def login(self, identity: Identity, token: str) -> None:
        await self.session.set_session(identity, token)

    async def logout(self) -> None:
        await self.session.clear_session()

    def subscribe(self, event_type: EventType, handler: EventHandler) -> Callable[[], bool]:
        return self.router.subscribe(event_type, handler)

    async def emit(self, event_type: EventType, payload: EventPayload | dict | None = None) -> bool:
        return await self.emitter.emit(event_type, payload)

    def activity_feed(self, max_entries: int | None = None) -> ActivityFeed:
        """Create an activity feed attached to this client's router."""
        feed = ActivityFeed(max_entries=max_entries or self.settings.activity.max_entries)
        feed.attach(self.router)
        return feed

    async def aclose(self) -> None:
        """Close the channel and stop following the session."""
        if self._unbind is not None:
            self._unbind()
            self._unbind = None
        await self.connection.close()

    async def __aenter__(self) -> "RealtimeClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
