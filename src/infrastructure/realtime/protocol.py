# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Wire framing for the event channel.

Every message is a JSON text frame ``{"type": ..., "payload": ...}``.
The first client frame is the authentication handshake; the backend
answers with either a ``connected`` frame carrying the channel id or an
``error`` frame.
"""

import json
from typing import Any

from pydantic import ValidationError

from src.infrastructure.events import DomainEvent, EventPayload, EventRegistry, EventType
from src.infrastructure.realtime.exceptions import EventDecodeError, HandshakeRejectedError

AUTH_FRAME = "auth"
CONNECTED_FRAME = "connected"
ERROR_FRAME = "error"


def encode_frame(frame_type: str, payload: Any = None) -> str:
    """Encode a frame for the wire.

    Args:
        frame_type: Event type or control frame name.
        payload: Typed payload model, JSON-compatible value or None.

    Returns:
        JSON text.
    """
    if isinstance(frame_type, EventType):
        frame_type = frame_type.value
    if isinstance(payload, EventPayload):
        payload = payload.to_wire()
    return json.dumps({"type": frame_type, "payload": payload})


def decode_frame(raw: str | bytes) -> tuple[str, Any]:
    """Split a raw frame into its type and payload.

    Raises:
        EventDecodeError: If the frame is not a JSON object with a string type.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EventDecodeError("Frame is not valid UTF-8") from e

    try:
        frame = json.loads(raw)
    except json.JSONDecodeError as e:
        raise EventDecodeError("Frame must be JSON", {"error": str(e)}) from e

    if not isinstance(frame, dict) or not isinstance(frame.get("type"), str):
        raise EventDecodeError("Frame must be an object with a string type")
    return frame["type"], frame.get("payload")


def build_handshake(token: str, user_id: str) -> str:
    """Encode the connect-time authentication frame."""
    return encode_frame(AUTH_FRAME, {"token": token, "userId": user_id})


def parse_handshake_reply(raw: str | bytes) -> str:
    """Extract the channel id from the backend's handshake reply.

    Returns:
        Backend-assigned channel id.

    Raises:
        HandshakeRejectedError: If the backend refused the handshake.
        EventDecodeError: If the reply is malformed.
    """
    frame_type, payload = decode_frame(raw)
    payload = payload if isinstance(payload, dict) else {}

    if frame_type == ERROR_FRAME:
        reason = payload.get("detail")
        raise HandshakeRejectedError("Handshake rejected by backend", reason=reason)
    if frame_type != CONNECTED_FRAME or not payload.get("channelId"):
        raise EventDecodeError("Unexpected handshake reply", {"type": frame_type})
    return str(payload["channelId"])


def parse_event(raw: str | bytes) -> DomainEvent:
    """Decode an inbound frame into a typed event.

    Raises:
        EventDecodeError: If the type is unknown or the payload invalid.
    """
    frame_type, data = decode_frame(raw)

    try:
        event_type = EventType(frame_type)
    except ValueError as e:
        raise EventDecodeError("Unknown event type", {"type": frame_type}) from e

    if not EventRegistry.is_inbound(event_type):
        raise EventDecodeError("Event type is not sent to clients", {"type": frame_type})

    try:
        payload = EventRegistry.parse_payload(event_type, data)
    except ValidationError as e:
        raise EventDecodeError(
            "Invalid event payload",
            {"type": frame_type, "errors": e.error_count()},
        ) from e

    return DomainEvent(event_type=event_type, payload=payload)
