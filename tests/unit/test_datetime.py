# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for datetime helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from src.utils.datetime import ensure_utc, format_iso, time_ago

REFERENCE = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "elapsed,expected",
    [
        (timedelta(seconds=0), "0s ago"),
        (timedelta(seconds=59), "59s ago"),
        (timedelta(minutes=1), "1m ago"),
        (timedelta(minutes=59, seconds=59), "59m ago"),
        (timedelta(hours=3, minutes=10), "3h ago"),
        (timedelta(seconds=-5), "0s ago"),
    ],
)
def test_time_ago(elapsed, expected) -> None:
    assert time_ago(REFERENCE - elapsed, REFERENCE) == expected


def test_ensure_utc_assumes_naive_is_utc() -> None:
    naive = datetime(2025, 3, 1, 12, 0)

    assert ensure_utc(naive) == REFERENCE
    assert ensure_utc(None) is None


def test_format_iso() -> None:
    assert format_iso(REFERENCE) == "2025-03-01T12:00:00+00:00"
    assert format_iso(None) is None
