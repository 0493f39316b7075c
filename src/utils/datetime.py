# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the ScholarSync client.

All datetimes handled by the client are timezone-aware UTC. Records coming
from the data layer or the messaging backend are normalized with
ensure_utc() before they are compared.

Usage:
------
    from src.utils.datetime import utc_now

    # For Pydantic model defaults
    created_at: datetime = Field(default_factory=utc_now)
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def format_iso(dt: datetime | None) -> str | None:
    """Format a datetime as ISO 8601 string.

    Args:
        dt: Datetime to format.

    Returns:
        ISO 8601 formatted string or None.
    """
    if dt is None:
        return None

    dt_utc = ensure_utc(dt)
    return dt_utc.isoformat()


def time_ago(timestamp: datetime, reference: datetime | None = None) -> str:
    """Render the elapsed time since a timestamp for activity lists.

    Args:
        timestamp: When the activity happened.
        reference: Point in time to measure from (defaults to now).

    Returns:
        Compact string like "42s ago", "5m ago" or "3h ago".
    """
    reference = ensure_utc(reference) if reference is not None else utc_now()
    seconds = int((reference - ensure_utc(timestamp)).total_seconds())
    seconds = max(seconds, 0)

    if seconds < 60:
        return f"{seconds}s ago"

    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"

    return f"{minutes // 60}h ago"


# Aliases for convenience
now = utc_now
