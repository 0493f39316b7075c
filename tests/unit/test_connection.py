# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the connection manager.

The channel runs over FakeTransport; settle() lets the background
reader task process queued frames.
"""

import asyncio
from unittest.mock import MagicMock

import pytest
import structlog

from src.infrastructure.events import EventType
from src.infrastructure.notifications import NotificationVariant
from src.infrastructure.realtime.connection import ConnectionManager, ConnectionStatus
from src.infrastructure.realtime.exceptions import ChannelClosedError, ChannelConnectionError
from src.infrastructure.realtime.navigation import HistoryNavigator
from src.infrastructure.realtime.presence import PresenceEntry
from src.infrastructure.realtime.session import SessionState
from src.infrastructure.realtime.storage import MemoryTokenStore
from tests.fakes import FakeTransport, settle


class TestOpen:
    """Tests for opening the channel."""

    @pytest.mark.asyncio
    async def test_open_connects_and_requests_presence(
        self, connection, transports, admin_session
    ) -> None:
        opened = await connection.open(admin_session)

        assert opened is True
        assert connection.status is ConnectionStatus.CONNECTED
        assert connection.channel_id == "chan-1"
        assert connection.session == admin_session
        transport = transports.last
        assert transport.handshakes == [
            {"type": "auth", "payload": {"token": "admin-token", "userId": "1"}}
        ]
        assert transport.sent == [{"type": "getConnectedUsers", "payload": None}]

        await connection.close()

    @pytest.mark.asyncio
    async def test_open_without_session_does_nothing(self, connection, transports) -> None:
        opened = await connection.open(None)

        assert opened is False
        assert connection.status is ConnectionStatus.DISCONNECTED
        assert transports.created == []

    @pytest.mark.asyncio
    async def test_status_transitions(self, connection, admin_session) -> None:
        seen: list[ConnectionStatus] = []
        connection.on_status_change(seen.append)

        await connection.open(admin_session)
        await connection.close()

        assert seen == [
            ConnectionStatus.CONNECTING,
            ConnectionStatus.CONNECTED,
            ConnectionStatus.DISCONNECTED,
        ]

    @pytest.mark.asyncio
    async def test_reopen_closes_previous_channel(
        self, connection, transports, admin_session, student_session
    ) -> None:
        await connection.open(admin_session)
        first = transports.last

        await connection.open(student_session)

        assert first.closed is True
        assert len(transports.created) == 2
        assert connection.channel_id == "chan-2"
        assert connection.router.identity == student_session.identity

        await connection.close()

    @pytest.mark.asyncio
    async def test_handshake_rejected_reports_error(
        self, connection, transports, notifier, admin_session
    ) -> None:
        transports.next_options = {"reject": "invalid token"}

        opened = await connection.open(admin_session)

        assert opened is False
        assert connection.status is ConnectionStatus.ERROR
        assert connection.channel_id is None
        assert transports.last.closed is True
        [toast] = notifier.in_app.toasts
        assert toast.title == "Connection Error"
        assert toast.description == "Could not connect to real-time server."
        assert toast.variant is NotificationVariant.DESTRUCTIVE

    @pytest.mark.asyncio
    async def test_transport_failure_reports_error(
        self, connection, transports, notifier, admin_session
    ) -> None:
        transports.next_options = {"fail": ChannelConnectionError("Connection refused")}

        opened = await connection.open(admin_session)

        assert opened is False
        assert connection.status is ConnectionStatus.ERROR
        assert len(notifier.in_app.toasts) == 1

    @pytest.mark.asyncio
    async def test_unexpected_connect_error_reports_error(
        self, router, notifier, admin_session
    ) -> None:
        transport = FakeTransport(fail=EOFError("server hung up during opening handshake"))
        manager = ConnectionManager(lambda: transport, router, notifier)

        opened = await manager.open(admin_session)

        assert opened is False
        assert manager.status is ConnectionStatus.ERROR
        assert transport.closed is True
        assert router.is_attached is False
        [toast] = notifier.in_app.toasts
        assert toast.title == "Connection Error"
        assert toast.data == {"error": "server hung up during opening handshake"}

    @pytest.mark.asyncio
    async def test_transport_factory_error_reports_error(self, router, notifier, admin_session) -> None:
        def broken_factory():
            raise OSError("no route to host")

        manager = ConnectionManager(broken_factory, router, notifier)

        opened = await manager.open(admin_session)

        assert opened is False
        assert manager.status is ConnectionStatus.ERROR
        assert len(notifier.in_app.toasts) == 1

    @pytest.mark.asyncio
    async def test_open_after_error_recovers(self, connection, transports, admin_session) -> None:
        transports.next_options = {"fail": ChannelConnectionError("Connection refused")}
        await connection.open(admin_session)

        transports.next_options = {}
        opened = await connection.open(admin_session)

        assert opened is True
        assert connection.status is ConnectionStatus.CONNECTED

        await connection.close()

    @pytest.mark.asyncio
    async def test_close_during_handshake_discards_channel(
        self, connection, transports, admin_session
    ) -> None:
        gate = asyncio.Event()
        original_factory_call = transports.__call__

        def gated():
            transport = original_factory_call()
            transport.connect_gate = gate
            return transport

        connection._transport_factory = gated
        pending = asyncio.create_task(connection.open(admin_session))
        await settle()

        await connection.close()
        gate.set()
        opened = await pending

        assert opened is False
        assert transports.last.closed is True
        assert connection.status is ConnectionStatus.DISCONNECTED


class TestClose:
    """Tests for closing the channel."""

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, connection, transports, admin_session) -> None:
        await connection.open(admin_session)

        await connection.close()
        await connection.close()

        assert connection.status is ConnectionStatus.DISCONNECTED
        assert transports.last.closed is True
        assert connection.channel_id is None
        assert connection.session is None

    @pytest.mark.asyncio
    async def test_close_detaches_handlers(self, connection, transports, admin_session) -> None:
        handler = MagicMock()
        connection.router.subscribe(EventType.USER_CONNECTED, handler)
        await connection.open(admin_session)
        transport = transports.last

        await connection.close()
        transport.push(EventType.USER_CONNECTED, {"userId": "5", "userName": "Eve"})
        await settle()

        handler.assert_not_called()
        assert connection.router.is_attached is False

    @pytest.mark.asyncio
    async def test_send_requires_connection(self, connection) -> None:
        with pytest.raises(ChannelClosedError):
            await connection.send('{"type": "getConnectedUsers", "payload": null}')


class TestReading:
    """Tests for the background reader."""

    @pytest.mark.asyncio
    async def test_frames_reach_router_in_order(
        self, connection, transports, admin_session
    ) -> None:
        received: list[str] = []
        connection.router.subscribe(
            EventType.USER_CONNECTED, lambda event: received.append(event.payload.user_id)
        )
        await connection.open(admin_session)
        transport = transports.last

        for user_id in ("5", "6", "7"):
            transport.push(EventType.USER_CONNECTED, {"userId": user_id, "userName": f"User {user_id}"})
        await settle()

        assert received == ["5", "6", "7"]
        await connection.close()

    @pytest.mark.asyncio
    async def test_initial_connected_users_replaces_presence(
        self, connection, transports, admin_session
    ) -> None:
        await connection.open(admin_session)
        transport = transports.last
        transport.push(EventType.USER_CONNECTED, {"userId": "9", "userName": "Zed"})
        await settle()

        transport.push(EventType.INITIAL_CONNECTED_USERS, [{"userId": "5", "userName": "Eve"}])
        await settle()

        assert connection.router.presence.snapshot() == [PresenceEntry("5", "Eve")]
        await connection.close()

    @pytest.mark.asyncio
    async def test_malformed_frame_keeps_channel_open(
        self, connection, transports, admin_session
    ) -> None:
        await connection.open(admin_session)
        transport = transports.last

        transport.push_raw("{broken")
        transport.push(EventType.USER_CONNECTED, {"userId": "5", "userName": "Eve"})
        await settle()

        assert connection.status is ConnectionStatus.CONNECTED
        assert "5" in connection.router.presence
        await connection.close()

    @pytest.mark.asyncio
    async def test_clean_server_close_disconnects_quietly(
        self, connection, transports, notifier, admin_session
    ) -> None:
        await connection.open(admin_session)

        transports.last.drop(clean=True, code=1000)
        await settle()

        assert connection.status is ConnectionStatus.DISCONNECTED
        assert connection.router.is_attached is False
        assert notifier.in_app.toasts == []

    @pytest.mark.asyncio
    async def test_abnormal_close_reports_error(
        self, connection, transports, notifier, admin_session
    ) -> None:
        await connection.open(admin_session)

        transports.last.drop(clean=False, code=1006)
        await settle()

        assert connection.status is ConnectionStatus.ERROR
        assert transports.last.closed is True
        [toast] = notifier.in_app.toasts
        assert toast.title == "Connection Error"

    @pytest.mark.asyncio
    async def test_log_context_bound_while_connected(self, connection, admin_session) -> None:
        await connection.open(admin_session)

        assert structlog.contextvars.get_contextvars() == {"user_id": "1", "channel_id": "chan-1"}

        await connection.close()

        assert structlog.contextvars.get_contextvars() == {}

    @pytest.mark.asyncio
    async def test_log_context_cleared_after_server_close(
        self, connection, transports, admin_session
    ) -> None:
        await connection.open(admin_session)
        transports.last.drop(clean=True, code=1000)
        await settle()
        assert connection.status is ConnectionStatus.DISCONNECTED

        await connection.close()

        assert structlog.contextvars.get_contextvars() == {}


class TestSessionBinding:
    """The channel follows session transitions."""

    @pytest.mark.asyncio
    async def test_login_opens_and_logout_closes(
        self, connection, transports, admin_identity
    ) -> None:
        session_state = SessionState(MemoryTokenStore(), HistoryNavigator("/login"))
        connection.bind(session_state)

        await session_state.set_session(admin_identity, "admin-token")
        assert connection.status is ConnectionStatus.CONNECTED
        assert transports.last.handshakes[0]["payload"]["token"] == "admin-token"

        await session_state.clear_session()
        assert connection.status is ConnectionStatus.DISCONNECTED
        assert transports.last.closed is True

    @pytest.mark.asyncio
    async def test_unbind_stops_following(self, router, notifier, transports, admin_identity) -> None:
        manager = ConnectionManager(transports, router, notifier)
        session_state = SessionState(MemoryTokenStore(), HistoryNavigator())
        unbind = manager.bind(session_state)

        unbind()
        await session_state.set_session(admin_identity, "admin-token")

        assert transports.created == []
        assert manager.status is ConnectionStatus.DISCONNECTED
