# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain services.

The credential token is opaque to the client. These collaborators issue
and verify it:

Exports:
    AuthService: In-process login and token verification.
    HttpTokenVerifier: Token verification against the authentication API.
    PasswordHasher: bcrypt hashing for the local account directory.
"""

from src.domains.auth.password import PasswordHasher
from src.domains.auth.service import (
    Account,
    AccountExistsError,
    AccountNotFoundError,
    AuthenticationError,
    AuthService,
    InvalidCredentialsError,
)
from src.domains.auth.verifier import HttpTokenVerifier, TokenVerificationError

__all__ = [
    "Account",
    "AccountExistsError",
    "AccountNotFoundError",
    "AuthenticationError",
    "AuthService",
    "HttpTokenVerifier",
    "InvalidCredentialsError",
    "PasswordHasher",
    "TokenVerificationError",
]
