# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Centralized event type definitions for the ScholarSync channel.

The set of event types exchanged with the messaging backend is closed.
Each type has a payload model; together they form a tagged union keyed
by EventType, so handlers receive typed payloads instead of raw dicts.

Wire field names are camelCase (``studentId``), Python attributes are
snake_case (``student_id``). Unknown extra fields are kept.

ReportUploaded decodes without ``articleTitle`` or ``reportId``: publishers
send them only when known, and the notification text needs neither.

Adding a new event:
1. Add a member to EventType
2. Add its payload model and register it in EventRegistry
3. Add its recipient rule to the event router
"""

from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EventType(str, Enum):
    """All event types exchanged over the channel."""

    # Presence (server-originated)
    USER_CONNECTED = "UserConnected"
    USER_DISCONNECTED = "UserDisconnected"

    # Domain events
    ARTICLE_ASSIGNED = "ArticleAssigned"
    ARTICLE_CONSULTED = "ArticleConsulted"
    REPORT_UPLOADED = "ReportUploaded"
    COMMENT_ADDED = "CommentAdded"

    # Presence request / reply
    GET_CONNECTED_USERS = "getConnectedUsers"
    INITIAL_CONNECTED_USERS = "InitialConnectedUsers"


class EventPayload(BaseModel):
    """Base class for event payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="allow",
        frozen=True,
    )

    event_type: ClassVar[EventType]

    def to_wire(self) -> Any:
        """Serialize to the JSON-compatible wire payload."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ArticleAssigned(EventPayload):
    """An administrator assigned an article to a student."""

    event_type: ClassVar[EventType] = EventType.ARTICLE_ASSIGNED

    student_id: str
    article_id: str
    article_title: str


class ArticleConsulted(EventPayload):
    """A user opened an article."""

    event_type: ClassVar[EventType] = EventType.ARTICLE_CONSULTED

    user_id: str
    user_name: str
    article_id: str
    article_title: str


class ReportUploaded(EventPayload):
    """A student uploaded a report for an assigned article."""

    event_type: ClassVar[EventType] = EventType.REPORT_UPLOADED

    student_id: str
    student_name: str
    article_id: str
    article_title: str | None = None
    report_id: str | None = None
    report_title: str


class CommentAdded(EventPayload):
    """An administrator commented on a student's report."""

    event_type: ClassVar[EventType] = EventType.COMMENT_ADDED

    report_id: str
    article_id: str
    student_id: str
    comment_text: str


class UserConnected(EventPayload):
    event_type: ClassVar[EventType] = EventType.USER_CONNECTED

    user_id: str
    user_name: str


class UserDisconnected(EventPayload):
    event_type: ClassVar[EventType] = EventType.USER_DISCONNECTED

    user_id: str
    user_name: str


class ConnectedUser(EventPayload):
    """One entry of the InitialConnectedUsers reply."""

    user_id: str
    user_name: str


class GetConnectedUsers(EventPayload):
    """Request for the full presence list. Carries no payload on the wire."""

    event_type: ClassVar[EventType] = EventType.GET_CONNECTED_USERS

    def to_wire(self) -> Any:
        return None


class InitialConnectedUsers(EventPayload):
    """Reply to getConnectedUsers. The wire payload is a bare array."""

    event_type: ClassVar[EventType] = EventType.INITIAL_CONNECTED_USERS

    users: list[ConnectedUser] = Field(default_factory=list)

    def to_wire(self) -> Any:
        return [user.to_wire() for user in self.users]


class EventRegistry:
    """Registry for event payload models and direction metadata."""

    _payload_models: dict[EventType, type[EventPayload]] = {
        EventType.USER_CONNECTED: UserConnected,
        EventType.USER_DISCONNECTED: UserDisconnected,
        EventType.ARTICLE_ASSIGNED: ArticleAssigned,
        EventType.ARTICLE_CONSULTED: ArticleConsulted,
        EventType.REPORT_UPLOADED: ReportUploaded,
        EventType.COMMENT_ADDED: CommentAdded,
        EventType.GET_CONNECTED_USERS: GetConnectedUsers,
        EventType.INITIAL_CONNECTED_USERS: InitialConnectedUsers,
    }

    # Events only the backend originates
    _server_only: frozenset[EventType] = frozenset(
        {
            EventType.USER_CONNECTED,
            EventType.USER_DISCONNECTED,
            EventType.INITIAL_CONNECTED_USERS,
        }
    )

    # Events the backend never sends to clients
    _client_only: frozenset[EventType] = frozenset({EventType.GET_CONNECTED_USERS})

    @classmethod
    def get_model(cls, event_type: EventType) -> type[EventPayload]:
        """Get the payload model for an event type.

        Args:
            event_type: Event type.

        Returns:
            Payload model class.
        """
        return cls._payload_models[event_type]

    @classmethod
    def parse_payload(cls, event_type: EventType, data: Any) -> EventPayload:
        """Validate a raw wire payload into its typed model.

        Args:
            event_type: Event type of the frame.
            data: Decoded JSON payload (object, array or null).

        Returns:
            Typed payload instance.

        Raises:
            pydantic.ValidationError: If the payload does not match the model.
        """
        model = cls.get_model(event_type)
        if event_type is EventType.INITIAL_CONNECTED_USERS and isinstance(data, list):
            data = {"users": data}
        if data is None:
            data = {}
        return model.model_validate(data)

    @classmethod
    def is_inbound(cls, event_type: EventType) -> bool:
        """Check if clients may receive this event type."""
        return event_type not in cls._client_only

    @classmethod
    def is_outbound(cls, event_type: EventType) -> bool:
        """Check if clients may emit this event type."""
        return event_type not in cls._server_only
