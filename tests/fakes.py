# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Test doubles for the event channel."""

import asyncio
import json
from typing import Any

from src.infrastructure.events import EventType
from src.infrastructure.realtime.exceptions import ChannelClosedError, HandshakeRejectedError
from src.infrastructure.realtime.transport import Transport


class FakeTransport(Transport):
    """In-memory transport. Inbound frames are queued with push()."""

    def __init__(
        self,
        channel_id: str = "chan-1",
        reject: str | None = None,
        fail: Exception | None = None,
    ) -> None:
        self.channel_id = channel_id
        self.reject = reject
        self.fail = fail
        self.handshakes: list[dict[str, Any]] = []
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self.connect_gate: asyncio.Event | None = None
        self._inbox: asyncio.Queue = asyncio.Queue()

    async def connect(self, handshake: str) -> str:
        self.handshakes.append(json.loads(handshake))
        if self.connect_gate is not None:
            await self.connect_gate.wait()
        if self.fail is not None:
            raise self.fail
        if self.reject is not None:
            raise HandshakeRejectedError("Handshake rejected by backend", reason=self.reject)
        return self.channel_id

    async def send(self, frame: str) -> None:
        if self.closed:
            raise ChannelClosedError()
        self.sent.append(json.loads(frame))

    async def receive(self) -> str | bytes:
        item = await self._inbox.get()
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True

    def push(self, event_type: EventType | str, payload: Any = None) -> None:
        name = event_type.value if isinstance(event_type, EventType) else event_type
        self._inbox.put_nowait(json.dumps({"type": name, "payload": payload}))

    def push_raw(self, raw: str | bytes) -> None:
        self._inbox.put_nowait(raw)

    def drop(self, clean: bool = True, code: int | None = None) -> None:
        self._inbox.put_nowait(ChannelClosedError("Connection closed", clean=clean, code=code))

    def sent_types(self) -> list[str]:
        return [frame["type"] for frame in self.sent]


class TransportFactory:
    """Hands out FakeTransports and remembers them."""

    def __init__(self) -> None:
        self.created: list[FakeTransport] = []
        self.next_options: dict[str, Any] = {}

    def __call__(self) -> FakeTransport:
        transport = FakeTransport(channel_id=f"chan-{len(self.created) + 1}", **self.next_options)
        self.created.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.created[-1]


async def settle(rounds: int = 50) -> None:
    """Let background reader tasks and handler gathers run."""
    for _ in range(rounds):
        await asyncio.sleep(0)
