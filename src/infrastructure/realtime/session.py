# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Session state for the authenticated identity.

The session holds who is signed in and the opaque credential token
issued by the authentication backend. It is the leaf of the real-time
layer: the connection manager listens to it and opens the channel when a
session starts, closing it when the session ends.

Lifecycle:
    restore()        process start, re-derive the session from the stored token
    set_session()    after login
    clear_session()  logout or invalid token
"""

import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from src.core.config.settings import SessionSettings
from src.infrastructure.realtime.navigation import Navigator
from src.infrastructure.realtime.storage import TokenStore

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Platform roles. A user has exactly one."""

    ADMIN = "admin"
    STUDENT = "student"

    @classmethod
    def parse(cls, value: "str | Role") -> "Role":
        """Parse a role, accepting the legacy "doctorant" value for students.

        Raises:
            ValueError: If the value is not a known role.
        """
        if isinstance(value, Role):
            return value
        normalized = str(value).strip().lower()
        if normalized == "doctorant":
            return cls.STUDENT
        return cls(normalized)


@dataclass(frozen=True)
class Identity:
    """Authenticated user identity.

    Attributes:
        user_id: Stable user identifier.
        display_name: Name shown to other users.
        role: Admin (supervisor) or student (doctoral candidate).
        domain: Research domain, students only.
        email: Contact address, if known.
    """

    user_id: str
    display_name: str
    role: Role
    domain: str | None = None
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_student(self) -> bool:
        return self.role is Role.STUDENT

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Identity":
        """Build an identity from a user record returned by the auth backend.

        Accepts both the backend field names (id, name, domaine) and the
        client ones (userId, displayName, domain).

        Raises:
            KeyError: If id, name or role is missing.
            ValueError: If the role is unknown.
        """
        user_id = data.get("id", data.get("userId", data.get("user_id")))
        name = data.get("name", data.get("displayName", data.get("display_name")))
        if user_id is None or name is None:
            raise KeyError("User record requires an id and a name")
        role = Role.parse(data["role"])
        return cls(
            user_id=str(user_id),
            display_name=str(name),
            role=role,
            domain=(data.get("domaine") or data.get("domain")) if role is Role.STUDENT else None,
            email=data.get("email"),
        )


@dataclass(frozen=True)
class Session:
    """An authenticated identity with its credential token."""

    identity: Identity
    token: str

    @property
    def user_id(self) -> str:
        return self.identity.user_id

    @property
    def role(self) -> Role:
        return self.identity.role


class TokenVerifier(ABC):
    """External collaborator that turns a stored token into an identity."""

    @abstractmethod
    async def verify(self, token: str) -> Identity | None:
        """Verify a credential token.

        Args:
            token: Opaque credential token.

        Returns:
            The identity the token belongs to, or None if it is invalid.
        """
        ...


SessionListener = Callable[[Session | None], Awaitable[None] | None]


class SessionState:
    """Holds the current session and notifies listeners of transitions.

    Attributes:
        settings: Storage key and role routing configuration.
    """

    def __init__(
        self,
        token_store: TokenStore,
        navigator: Navigator,
        settings: SessionSettings | None = None,
        verifier: TokenVerifier | None = None,
    ) -> None:
        """Initialize session state.

        Args:
            token_store: Durable client storage for the credential token.
            navigator: Routing collaborator for role redirects.
            settings: Session settings.
            verifier: Token verification collaborator used by restore().
        """
        self.settings = settings or SessionSettings()
        self._token_store = token_store
        self._navigator = navigator
        self._verifier = verifier
        self._session: Session | None = None
        self._listeners: list[SessionListener] = []

    @property
    def current(self) -> Session | None:
        """The active session, or None when signed out."""
        return self._session

    @property
    def identity(self) -> Identity | None:
        return self._session.identity if self._session else None

    @property
    def token(self) -> str | None:
        return self._session.token if self._session else None

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        """Register a callback invoked with the new session on every transition.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def set_session(self, identity: Identity, token: str) -> Session:
        """Start a session after a successful login.

        Persists the token, redirects to the role home when the user is
        not already inside their role area, and notifies listeners.

        Args:
            identity: Authenticated identity.
            token: Credential token issued by the auth backend.

        Returns:
            The new session.
        """
        session = Session(identity=identity, token=token)
        self._session = session
        self._token_store.save(token)
        logger.info("Session started for user %s (%s)", identity.user_id, identity.role.value)

        self._redirect_to_role_home(identity)
        await self._notify(session)
        return session

    async def clear_session(self) -> None:
        """End the session.

        Removes the stored token, always redirects to the login route and
        notifies listeners so the channel gets closed.
        """
        previous = self._session
        self._session = None
        self._token_store.clear()
        if previous is not None:
            logger.info("Session ended for user %s", previous.user_id)

        self._navigator.push(self.settings.login_route)
        await self._notify(None)

    async def restore(self) -> Identity | None:
        """Re-derive the session from the persisted token at process start.

        An invalid token, or a verifier failure, silently clears the stored
        token and leaves the session empty: no redirect, no notification.

        Returns:
            The restored identity, or None.
        """
        token = self._token_store.load()
        if not token:
            return None

        if self._verifier is None:
            logger.warning("No token verifier configured, cannot restore session")
            return None

        try:
            identity = await self._verifier.verify(token)
        except Exception as e:
            logger.warning("Token verification failed: %s", str(e))
            identity = None

        if identity is None:
            logger.info("Stored credential token is invalid, discarding it")
            self._token_store.clear()
            return None

        self._session = Session(identity=identity, token=token)
        logger.info("Session restored for user %s", identity.user_id)
        self._redirect_to_role_home(identity)
        await self._notify(self._session)
        return identity

    def home_route(self, role: Role) -> str:
        """Landing route for a role."""
        return self.settings.admin_home if role is Role.ADMIN else self.settings.student_home

    def _role_area(self, role: Role) -> str:
        # "/admin/dashboard" -> "/admin"
        home = self.home_route(role)
        segment = home.strip("/").split("/", 1)[0]
        return f"/{segment}"

    def _redirect_to_role_home(self, identity: Identity) -> None:
        current = self._navigator.current_path
        area = self._role_area(identity.role)
        inside_area = current == area or current.startswith(area + "/")
        if inside_area and current not in self.settings.entry_routes:
            return
        self._navigator.push(self.home_route(identity.role))

    async def _notify(self, session: Session | None) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(session)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("Session listener failed: %s", str(e), exc_info=True)
