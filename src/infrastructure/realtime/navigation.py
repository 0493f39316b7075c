# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Route navigation seam used by the session state for role redirects."""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class Navigator(ABC):
    """Routing collaborator provided by the UI shell."""

    @property
    @abstractmethod
    def current_path(self) -> str:
        """Route currently displayed."""
        ...

    @abstractmethod
    def push(self, route: str) -> None:
        """Navigate to a route."""
        ...


class HistoryNavigator(Navigator):
    """In-memory navigator that records every route visited.

    Attributes:
        history: Routes in visiting order, starting with the initial route.
    """

    def __init__(self, initial_path: str = "/") -> None:
        self.history: list[str] = [initial_path]

    @property
    def current_path(self) -> str:
        return self.history[-1]

    def push(self, route: str) -> None:
        logger.debug("Navigating from %s to %s", self.current_path, route)
        self.history.append(route)
