# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Administrator dashboard activity feed.

A view-model that subscribes to the event router and keeps the most
recent activity records plus the article each connected user is
currently viewing. It is an ordinary router subscriber: it only sees
events that pass the router's recipient rules.
"""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from src.infrastructure.events import (
    ArticleConsulted,
    CommentAdded,
    DomainEvent,
    EventType,
    ReportUploaded,
    UserConnected,
    UserDisconnected,
)
from src.infrastructure.realtime.router import EventRouter
from src.utils.datetime import time_ago, utc_now

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 10


class ActivityKind(str, Enum):
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    VIEW = "view"
    UPLOAD = "upload"
    COMMENT = "comment"


@dataclass(frozen=True)
class ActivityRecord:
    """One line of the activity feed."""

    type: ActivityKind
    message: str
    timestamp: datetime


@dataclass(frozen=True)
class ArticleView:
    """The article a user most recently opened."""

    user_id: str
    user_name: str
    article_id: str
    article_title: str
    timestamp: datetime


class ActivityFeed:
    """Most-recent-first activity log bounded to max_entries.

    Attributes:
        max_entries: Capacity of the ring buffer; the oldest record is
            dropped on overflow.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.max_entries = max_entries
        self._clock = clock
        self._records: deque[ActivityRecord] = deque(maxlen=max_entries)
        self._views: dict[str, ArticleView] = {}
        self._unsubscribers: list[Callable[[], bool]] = []

    @property
    def records(self) -> list[ActivityRecord]:
        """Records, newest first."""
        return list(self._records)

    @property
    def views(self) -> list[ArticleView]:
        """Current article views, most recent first."""
        return sorted(self._views.values(), key=lambda view: view.timestamp, reverse=True)

    def attach(self, router: EventRouter) -> None:
        """Subscribe to the router. Calling twice does not double-subscribe."""
        if self._unsubscribers:
            return
        handlers = {
            EventType.USER_CONNECTED: self._on_user_connected,
            EventType.USER_DISCONNECTED: self._on_user_disconnected,
            EventType.ARTICLE_CONSULTED: self._on_article_consulted,
            EventType.REPORT_UPLOADED: self._on_report_uploaded,
            EventType.COMMENT_ADDED: self._on_comment_added,
        }
        for event_type, handler in handlers.items():
            self._unsubscribers.append(router.subscribe(event_type, handler))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def record(self, kind: ActivityKind, message: str) -> ActivityRecord:
        entry = ActivityRecord(type=kind, message=message, timestamp=self._clock())
        self._records.appendleft(entry)
        return entry

    def clear(self) -> None:
        self._records.clear()
        self._views.clear()

    def formatted(self, reference: datetime | None = None) -> list[dict[str, Any]]:
        """Records with a relative "time ago" string for display."""
        reference = reference or self._clock()
        return [
            {
                "type": record.type.value,
                "message": record.message,
                "timestamp": record.timestamp,
                "time_ago": time_ago(record.timestamp, reference),
            }
            for record in self._records
        ]

    def _on_user_connected(self, event: DomainEvent) -> None:
        payload: UserConnected = event.payload
        self.record(ActivityKind.CONNECT, f"{payload.user_name} connected.")

    def _on_user_disconnected(self, event: DomainEvent) -> None:
        payload: UserDisconnected = event.payload
        self._views.pop(payload.user_id, None)
        self.record(ActivityKind.DISCONNECT, f"{payload.user_name} disconnected.")

    def _on_article_consulted(self, event: DomainEvent) -> None:
        payload: ArticleConsulted = event.payload
        now = self._clock()
        self._views[payload.user_id] = ArticleView(
            user_id=payload.user_id,
            user_name=payload.user_name,
            article_id=payload.article_id,
            article_title=payload.article_title,
            timestamp=now,
        )
        self.record(ActivityKind.VIEW, f"{payload.user_name} viewing: {payload.article_title}")

    def _on_report_uploaded(self, event: DomainEvent) -> None:
        payload: ReportUploaded = event.payload
        self.record(ActivityKind.UPLOAD, f"{payload.student_name} uploaded: {payload.report_title}")

    def _on_comment_added(self, event: DomainEvent) -> None:
        payload: CommentAdded = event.payload
        self.record(ActivityKind.COMMENT, f"Comment added to report {payload.report_id}")
