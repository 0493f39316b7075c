# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the administrator activity feed."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from src.infrastructure.events import EventType
from src.infrastructure.realtime.activity import ActivityFeed, ActivityKind


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


def frame(event_type: EventType, payload) -> str:
    return json.dumps({"type": event_type.value, "payload": payload})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def feed(router, admin_identity, clock) -> ActivityFeed:
    feed = ActivityFeed(max_entries=3, clock=clock)
    feed.attach(router)
    router.attach(admin_identity)
    return feed


class TestActivityFeed:
    """Tests for ActivityFeed."""

    @pytest.mark.asyncio
    async def test_records_messages_newest_first(self, feed, router) -> None:
        await router.handle_frame(frame(EventType.USER_CONNECTED, {"userId": "2", "userName": "Alice"}))
        await router.handle_frame(
            frame(
                EventType.REPORT_UPLOADED,
                {"studentId": "2", "studentName": "Alice", "articleId": "art1", "reportTitle": "q.pdf"},
            )
        )

        assert [(r.type, r.message) for r in feed.records] == [
            (ActivityKind.UPLOAD, "Alice uploaded: q.pdf"),
            (ActivityKind.CONNECT, "Alice connected."),
        ]

    @pytest.mark.asyncio
    async def test_bounded_to_max_entries(self, feed, router) -> None:
        for user_id in ("2", "3", "4", "5"):
            await router.handle_frame(
                frame(EventType.USER_CONNECTED, {"userId": user_id, "userName": f"User {user_id}"})
            )

        assert [r.message for r in feed.records] == [
            "User 5 connected.",
            "User 4 connected.",
            "User 3 connected.",
        ]

    @pytest.mark.asyncio
    async def test_tracks_article_views(self, feed, router, clock) -> None:
        await router.handle_frame(
            frame(
                EventType.ARTICLE_CONSULTED,
                {"userId": "2", "userName": "Alice", "articleId": "art1", "articleTitle": "Quantum"},
            )
        )
        clock.advance(5)
        await router.handle_frame(
            frame(
                EventType.ARTICLE_CONSULTED,
                {"userId": "3", "userName": "Bob", "articleId": "art3", "articleTitle": "Strings"},
            )
        )

        assert [view.user_id for view in feed.views] == ["3", "2"]
        assert feed.records[0].message == "Bob viewing: Strings"

    @pytest.mark.asyncio
    async def test_disconnect_drops_view(self, feed, router) -> None:
        await router.handle_frame(
            frame(
                EventType.ARTICLE_CONSULTED,
                {"userId": "2", "userName": "Alice", "articleId": "art1", "articleTitle": "Quantum"},
            )
        )
        await router.handle_frame(frame(EventType.USER_DISCONNECTED, {"userId": "2", "userName": "Alice"}))

        assert feed.views == []
        assert feed.records[0].message == "Alice disconnected."

    @pytest.mark.asyncio
    async def test_comment_message(self, feed, router) -> None:
        await router.handle_frame(
            frame(
                EventType.COMMENT_ADDED,
                {"reportId": "rep1", "articleId": "art1", "studentId": "2", "commentText": "Good"},
            )
        )

        assert feed.records[0].type is ActivityKind.COMMENT
        assert feed.records[0].message == "Comment added to report rep1"

    @pytest.mark.asyncio
    async def test_detach_stops_recording(self, feed, router) -> None:
        feed.detach()

        await router.handle_frame(frame(EventType.USER_CONNECTED, {"userId": "2", "userName": "Alice"}))

        assert feed.records == []

    @pytest.mark.asyncio
    async def test_attach_twice_records_once(self, feed, router) -> None:
        feed.attach(router)

        await router.handle_frame(frame(EventType.USER_CONNECTED, {"userId": "2", "userName": "Alice"}))

        assert len(feed.records) == 1

    def test_formatted_time_ago(self, clock) -> None:
        feed = ActivityFeed(clock=clock)
        feed.record(ActivityKind.CONNECT, "Alice connected.")
        clock.advance(90)
        feed.record(ActivityKind.UPLOAD, "Alice uploaded: q.pdf")

        rows = feed.formatted(clock.now + timedelta(seconds=30))

        assert [row["time_ago"] for row in rows] == ["30s ago", "2m ago"]
        assert rows[0]["type"] == "upload"
