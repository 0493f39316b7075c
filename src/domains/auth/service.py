# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-process authentication service.

Stands in for the external authentication backend: it checks email and
password against a local account directory, issues opaque credential
tokens and verifies them. It implements the TokenVerifier contract so it
can back session restore directly.

Example:
    >>> auth = AuthService.with_demo_accounts()
    >>> identity, token = await auth.login("admin@example.com", "password")
    >>> await auth.verify(token) == identity
    True
"""

import logging
import secrets
from dataclasses import dataclass

from src.domains.auth.password import PasswordHasher
from src.infrastructure.realtime.session import Identity, Role, TokenVerifier

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Base exception for authentication errors."""

    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised when email or password is wrong."""

    pass


class AccountExistsError(AuthenticationError):
    """Raised when registering an email twice."""

    pass


class AccountNotFoundError(AuthenticationError):
    """Raised when no account belongs to a user id."""

    pass


@dataclass(frozen=True)
class Account:
    """A local account."""

    email: str
    identity: Identity
    password_hash: str


class AuthService(TokenVerifier):
    """Login, token issuance and token verification.

    Attributes:
        hasher: Password hasher for the account directory.
    """

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        """Initialize the authentication service.

        Args:
            hasher: Password hasher. Defaults to bcrypt with 12 rounds.
        """
        self.hasher = hasher or PasswordHasher()
        self._accounts: dict[str, Account] = {}
        self._tokens: dict[str, Identity] = {}

    @classmethod
    def with_demo_accounts(cls, hasher: PasswordHasher | None = None) -> "AuthService":
        """Service preloaded with one supervisor and one doctoral student."""
        service = cls(hasher)
        service.register(
            Identity(user_id="1", display_name="Admin User", role=Role.ADMIN, email="admin@example.com"),
            password="password",
        )
        service.register(
            Identity(
                user_id="2",
                display_name="Student User",
                role=Role.STUDENT,
                email="student@example.com",
            ),
            password="password",
        )
        return service

    def register(self, identity: Identity, password: str) -> Account:
        """Add an account.

        Raises:
            ValueError: If the identity has no email.
            AccountExistsError: If the email is already registered.
        """
        if not identity.email:
            raise ValueError("Account identity requires an email")
        email = identity.email.strip().lower()
        if email in self._accounts:
            raise AccountExistsError(f"Account {email} already exists")

        account = Account(email=email, identity=identity, password_hash=self.hasher.hash(password))
        self._accounts[email] = account
        logger.info("Registered %s account %s", identity.role.value, identity.user_id)
        return account

    async def login(self, email: str, password: str) -> tuple[Identity, str]:
        """Authenticate and issue a credential token.

        Returns:
            The identity and its new token.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password wrong.
        """
        account = self._accounts.get(email.strip().lower())
        if account is None or not self.hasher.verify(password, account.password_hash):
            logger.info("Failed login attempt for %s", email)
            raise InvalidCredentialsError("Invalid credentials")

        token = secrets.token_urlsafe(32)
        self._tokens[token] = account.identity
        logger.info("User %s logged in", account.identity.user_id)
        return account.identity, token

    async def verify(self, token: str) -> Identity | None:
        return self._tokens.get(token)

    def revoke(self, token: str) -> bool:
        """Invalidate a token.

        Returns:
            True if the token was valid.
        """
        return self._tokens.pop(token, None) is not None

    def find_account(self, user_id: str) -> Account | None:
        return next(
            (account for account in self._accounts.values() if account.identity.user_id == user_id),
            None,
        )

    def update_account(
        self,
        user_id: str,
        identity: Identity | None = None,
        password: str | None = None,
    ) -> Account:
        """Change an account's identity (name, email, domain) or password.

        Tokens already issued for the account resolve to the new identity.

        Raises:
            AccountNotFoundError: If no account belongs to user_id.
            AccountExistsError: If the new email belongs to another account.
            ValueError: If the new identity has no email.
        """
        account = self.find_account(user_id)
        if account is None:
            raise AccountNotFoundError(f"No account for user {user_id}")

        new_identity = identity or account.identity
        if not new_identity.email:
            raise ValueError("Account identity requires an email")
        email = new_identity.email.strip().lower()
        if email != account.email and email in self._accounts:
            raise AccountExistsError(f"Account {email} already exists")

        updated = Account(
            email=email,
            identity=new_identity,
            password_hash=self.hasher.hash(password) if password else account.password_hash,
        )
        del self._accounts[account.email]
        self._accounts[email] = updated
        for token, token_identity in list(self._tokens.items()):
            if token_identity.user_id == user_id:
                self._tokens[token] = new_identity
        logger.info("Updated account %s", user_id)
        return updated

    def remove_account(self, user_id: str) -> bool:
        """Delete an account and revoke its tokens.

        Returns:
            True if the account existed.
        """
        account = self.find_account(user_id)
        if account is None:
            return False
        del self._accounts[account.email]
        self._tokens = {
            token: identity for token, identity in self._tokens.items() if identity.user_id != user_id
        }
        logger.info("Removed account %s", user_id)
        return True
