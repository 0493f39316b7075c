# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for channel framing."""

import json

import pytest

from src.infrastructure.events import (
    ArticleAssigned,
    EventType,
    GetConnectedUsers,
    InitialConnectedUsers,
    UserConnected,
)
from src.infrastructure.realtime.exceptions import EventDecodeError, HandshakeRejectedError
from src.infrastructure.realtime.protocol import (
    build_handshake,
    decode_frame,
    encode_frame,
    parse_event,
    parse_handshake_reply,
)


class TestEncode:
    """Tests for outbound frames."""

    def test_typed_payload_uses_wire_names(self) -> None:
        raw = encode_frame(
            EventType.ARTICLE_ASSIGNED,
            ArticleAssigned(student_id="2", article_id="art1", article_title="Quantum"),
        )

        assert json.loads(raw) == {
            "type": "ArticleAssigned",
            "payload": {"studentId": "2", "articleId": "art1", "articleTitle": "Quantum"},
        }

    def test_get_connected_users_has_null_payload(self) -> None:
        raw = encode_frame(EventType.GET_CONNECTED_USERS, GetConnectedUsers())

        assert json.loads(raw) == {"type": "getConnectedUsers", "payload": None}

    def test_handshake(self) -> None:
        assert json.loads(build_handshake("tok", "2")) == {
            "type": "auth",
            "payload": {"token": "tok", "userId": "2"},
        }


class TestDecode:
    """Tests for inbound frames."""

    def test_decode_bytes(self) -> None:
        assert decode_frame(b'{"type": "connected", "payload": {"channelId": "c"}}') == (
            "connected",
            {"channelId": "c"},
        )

    @pytest.mark.parametrize("raw", ["", "[]", '{"payload": {}}', '{"type": 3}', b"\xff\xfe"])
    def test_decode_rejects_malformed(self, raw) -> None:
        with pytest.raises(EventDecodeError):
            decode_frame(raw)

    def test_parse_presence_event(self) -> None:
        event = parse_event(json.dumps({"type": "UserConnected", "payload": {"userId": 5, "userName": "Eve"}}))

        assert event.event_type is EventType.USER_CONNECTED
        assert event.payload == UserConnected(user_id="5", user_name="Eve")

    def test_parse_initial_connected_users_array(self) -> None:
        event = parse_event(
            json.dumps(
                {
                    "type": "InitialConnectedUsers",
                    "payload": [{"userId": "5", "userName": "Eve"}, {"userId": "6", "userName": "Frank"}],
                }
            )
        )

        assert isinstance(event.payload, InitialConnectedUsers)
        assert [user.user_id for user in event.payload.users] == ["5", "6"]
        assert event.payload.to_wire() == [
            {"userId": "5", "userName": "Eve"},
            {"userId": "6", "userName": "Frank"},
        ]

    def test_parse_keeps_unknown_fields(self) -> None:
        event = parse_event(
            json.dumps(
                {
                    "type": "CommentAdded",
                    "payload": {
                        "reportId": "rep1",
                        "articleId": "art1",
                        "studentId": "2",
                        "commentText": "Good",
                        "extra": 1,
                    },
                }
            )
        )

        assert event.payload.comment_text == "Good"
        assert event.payload.to_wire()["extra"] == 1

    def test_parse_rejects_client_only_type(self) -> None:
        with pytest.raises(EventDecodeError):
            parse_event(json.dumps({"type": "getConnectedUsers", "payload": None}))

    def test_parse_rejects_invalid_payload(self) -> None:
        with pytest.raises(EventDecodeError) as exc_info:
            parse_event(json.dumps({"type": "ReportUploaded", "payload": {"studentId": "2"}}))

        assert exc_info.value.details["type"] == "ReportUploaded"

    def test_parse_rejects_comment_without_text(self) -> None:
        with pytest.raises(EventDecodeError):
            parse_event(
                json.dumps(
                    {
                        "type": "CommentAdded",
                        "payload": {"reportId": "rep1", "articleId": "art1", "studentId": "2"},
                    }
                )
            )

    def test_parse_report_without_optional_fields(self) -> None:
        event = parse_event(
            json.dumps(
                {
                    "type": "ReportUploaded",
                    "payload": {
                        "studentId": "2",
                        "studentName": "Alice",
                        "articleId": "art1",
                        "reportTitle": "quantum.pdf",
                    },
                }
            )
        )

        assert event.payload.article_title is None
        assert event.payload.report_id is None


class TestHandshakeReply:
    """Tests for the backend's handshake answer."""

    def test_connected(self) -> None:
        reply = json.dumps({"type": "connected", "payload": {"channelId": "abc123"}})

        assert parse_handshake_reply(reply) == "abc123"

    def test_error(self) -> None:
        reply = json.dumps({"type": "error", "payload": {"detail": "invalid token"}})

        with pytest.raises(HandshakeRejectedError) as exc_info:
            parse_handshake_reply(reply)

        assert exc_info.value.reason == "invalid token"

    def test_unexpected_frame(self) -> None:
        with pytest.raises(EventDecodeError):
            parse_handshake_reply(json.dumps({"type": "UserConnected", "payload": {}}))
