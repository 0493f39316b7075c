# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Client-side presence tracking.

The registry is mutated only by the event router (UserConnected,
UserDisconnected, InitialConnectedUsers). Everyone else reads snapshots.
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterable, Iterator


@dataclass(frozen=True)
class PresenceEntry:
    """A connected user."""

    user_id: str
    display_name: str


class PresenceRegistry:
    """Set of connected users keyed by user id, in connection order.

    At most one entry exists per user id; a later connect for the same
    id replaces the earlier entry and moves it to the end.
    """

    def __init__(self) -> None:
        self._entries: OrderedDict[str, PresenceEntry] = OrderedDict()

    def upsert(self, entry: PresenceEntry) -> None:
        self._entries.pop(entry.user_id, None)
        self._entries[entry.user_id] = entry

    def remove(self, user_id: str) -> bool:
        """Remove a user.

        Returns:
            True if the user was present.
        """
        return self._entries.pop(user_id, None) is not None

    def replace_all(self, entries: Iterable[PresenceEntry]) -> None:
        """Replace the whole list with a backend snapshot."""
        self._entries.clear()
        for entry in entries:
            self.upsert(entry)

    def clear(self) -> None:
        self._entries.clear()

    def get(self, user_id: str) -> PresenceEntry | None:
        return self._entries.get(user_id)

    def snapshot(self) -> list[PresenceEntry]:
        """Copy of the current entries."""
        return list(self._entries.values())

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PresenceEntry]:
        return iter(self.snapshot())
