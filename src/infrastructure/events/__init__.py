# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Event infrastructure module for the ScholarSync client.

This module defines the closed event taxonomy exchanged with the
messaging backend and the in-process bus that fans inbound events out
to interested handlers.

Components:
- EventType / payload models: Tagged union over the channel events
- EventRegistry: Payload model lookup and direction metadata
- EventBus: Typed observer registry used by the event router

Quick Start:
    from src.infrastructure.events import EventBus, EventType

    bus = EventBus()
    bus.subscribe(EventType.REPORT_UPLOADED, my_handler)
"""

from src.infrastructure.events.bus import (
    DomainEvent,
    EventBus,
    EventHandler,
)
from src.infrastructure.events.types import (
    ArticleAssigned,
    ArticleConsulted,
    CommentAdded,
    ConnectedUser,
    EventPayload,
    EventRegistry,
    EventType,
    GetConnectedUsers,
    InitialConnectedUsers,
    ReportUploaded,
    UserConnected,
    UserDisconnected,
)

__all__ = [
    # Event Bus
    "EventBus",
    "DomainEvent",
    "EventHandler",
    # Event Types
    "EventType",
    "EventRegistry",
    "EventPayload",
    "ArticleAssigned",
    "ArticleConsulted",
    "ReportUploaded",
    "CommentAdded",
    "UserConnected",
    "UserDisconnected",
    "ConnectedUser",
    "GetConnectedUsers",
    "InitialConnectedUsers",
]
