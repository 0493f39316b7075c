# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Real-time notification and presence layer.

Components (leaf to root):
- SessionState: Authenticated identity and persisted credential token
- ConnectionManager: The single channel to the messaging backend
- EventRouter: Recipient filtering, presence, toasts and handler fan-out
- OutboundEmitter: Fire-and-forget publishing of domain events
- RealtimeClient: Wires the above together for one process

Architecture:
    SessionState change → ConnectionManager.open/close → EventRouter attach
    user action succeeds → OutboundEmitter.emit → backend fan-out
    → other clients' EventRouter → toasts / handlers
"""

from src.infrastructure.realtime.activity import (
    ActivityFeed,
    ActivityKind,
    ActivityRecord,
    ArticleView,
)
from src.infrastructure.realtime.client import RealtimeClient
from src.infrastructure.realtime.connection import ConnectionManager, ConnectionStatus
from src.infrastructure.realtime.emitter import OutboundEmitter
from src.infrastructure.realtime.exceptions import (
    ChannelClosedError,
    ChannelConnectionError,
    EventDecodeError,
    HandshakeRejectedError,
    RealtimeError,
)
from src.infrastructure.realtime.navigation import HistoryNavigator, Navigator
from src.infrastructure.realtime.presence import PresenceEntry, PresenceRegistry
from src.infrastructure.realtime.router import EventRouter
from src.infrastructure.realtime.session import (
    Identity,
    Role,
    Session,
    SessionState,
    TokenVerifier,
)
from src.infrastructure.realtime.storage import FileTokenStore, MemoryTokenStore, TokenStore
from src.infrastructure.realtime.transport import Transport, WebSocketTransport

__all__ = [
    # Session
    "Identity",
    "Role",
    "Session",
    "SessionState",
    "TokenVerifier",
    "TokenStore",
    "FileTokenStore",
    "MemoryTokenStore",
    "Navigator",
    "HistoryNavigator",
    # Channel
    "ConnectionManager",
    "ConnectionStatus",
    "Transport",
    "WebSocketTransport",
    # Routing
    "EventRouter",
    "PresenceEntry",
    "PresenceRegistry",
    "ActivityFeed",
    "ActivityKind",
    "ActivityRecord",
    "ArticleView",
    # Publishing
    "OutboundEmitter",
    # Composition
    "RealtimeClient",
    # Errors
    "RealtimeError",
    "ChannelConnectionError",
    "HandshakeRejectedError",
    "ChannelClosedError",
    "EventDecodeError",
]
