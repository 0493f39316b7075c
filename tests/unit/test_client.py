# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the real-time client composition root."""

from unittest.mock import MagicMock

import pytest

from src.core.config.settings import ActivitySettings, Settings
from src.domains.auth import AuthService, PasswordHasher
from src.infrastructure.events import EventType
from src.infrastructure.realtime import (
    ConnectionStatus,
    HistoryNavigator,
    MemoryTokenStore,
    RealtimeClient,
)
from tests.fakes import TransportFactory, settle


@pytest.fixture
def auth_service() -> AuthService:
    return AuthService.with_demo_accounts(PasswordHasher(rounds=4))


@pytest.fixture
def client_parts(auth_service):
    transports = TransportFactory()
    store = MemoryTokenStore()
    navigator = HistoryNavigator("/login")
    client = RealtimeClient.create(
        Settings(activity=ActivitySettings(max_entries=5)),
        verifier=auth_service,
        navigator=navigator,
        token_store=store,
        transport_factory=transports,
    )
    return client, transports, store, navigator


class TestRealtimeClient:
    """Tests for RealtimeClient."""

    @pytest.mark.asyncio
    async def test_login_opens_channel(self, client_parts, auth_service) -> None:
        client, transports, store, navigator = client_parts
        identity, token = await auth_service.login("admin@example.com", "password")

        await client.login(identity, token)

        assert client.is_connected
        assert client.status is ConnectionStatus.CONNECTED
        assert store.load() == token
        assert navigator.current_path == "/admin/dashboard"
        assert transports.last.handshakes[0]["payload"] == {"token": token, "userId": "1"}

        await client.aclose()

    @pytest.mark.asyncio
    async def test_logout_closes_channel(self, client_parts, auth_service) -> None:
        client, transports, store, navigator = client_parts
        identity, token = await auth_service.login("student@example.com", "password")
        await client.login(identity, token)

        await client.logout()

        assert client.status is ConnectionStatus.DISCONNECTED
        assert transports.last.closed is True
        assert store.load() is None
        assert navigator.current_path == "/login"

    @pytest.mark.asyncio
    async def test_start_restores_stored_session(self, client_parts, auth_service) -> None:
        client, transports, store, _ = client_parts
        _, token = await auth_service.login("student@example.com", "password")
        store.save(token)

        async with client:
            assert client.session.identity.user_id == "2"
            assert client.is_connected

        assert client.status is ConnectionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_start_without_token(self, client_parts) -> None:
        client, transports, _, _ = client_parts

        assert await client.start() is None
        assert transports.created == []

    @pytest.mark.asyncio
    async def test_subscribe_and_presence(self, client_parts, auth_service) -> None:
        client, transports, _, _ = client_parts
        handler = MagicMock()
        client.subscribe(EventType.USER_CONNECTED, handler)
        identity, token = await auth_service.login("admin@example.com", "password")
        await client.login(identity, token)

        transports.last.push(EventType.USER_CONNECTED, {"userId": "2", "userName": "Student User"})
        await settle()

        handler.assert_called_once()
        assert [entry.user_id for entry in client.presence] == ["2"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_emit_goes_through_channel(self, client_parts, auth_service) -> None:
        client, transports, _, _ = client_parts
        identity, token = await auth_service.login("student@example.com", "password")
        await client.login(identity, token)

        sent = await client.emit(
            EventType.ARTICLE_CONSULTED,
            {"userId": "2", "userName": "Student User", "articleId": "art1", "articleTitle": "Q"},
        )

        assert sent is True
        assert transports.last.sent_types() == ["getConnectedUsers", "ArticleConsulted"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_emit_without_session_warns(self, client_parts) -> None:
        client, _, _, _ = client_parts

        assert await client.emit(EventType.COMMENT_ADDED, {"reportId": "rep1"}) is False
        assert len(client.notifier.in_app.toasts) == 1

    def test_activity_feed_uses_configured_size(self, client_parts) -> None:
        client, _, _, _ = client_parts

        feed = client.activity_feed()

        assert feed.max_entries == 5

    @pytest.mark.asyncio
    async def test_aclose_stops_following_session(self, client_parts, auth_service) -> None:
        client, transports, _, _ = client_parts
        await client.aclose()
        identity, token = await auth_service.login("admin@example.com", "password")

        await client.login(identity, token)

        assert transports.created == []
