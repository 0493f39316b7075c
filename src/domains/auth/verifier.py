# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTTP token verifier for the external authentication backend.

Calls ``GET {auth_url}/me`` with the credential token as a bearer token.
A 200 reply carries the user record; 401 and 403 mean the token is
invalid. Anything else is a verification failure.
"""

import logging

import httpx

from src.core.config.settings import AuthSettings
from src.domains.auth.service import AuthenticationError
from src.infrastructure.realtime.session import Identity, TokenVerifier

logger = logging.getLogger(__name__)


class TokenVerificationError(AuthenticationError):
    """The authentication backend could not verify a token."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class HttpTokenVerifier(TokenVerifier):
    """Verify tokens against the authentication API.

    Attributes:
        base_url: Base URL of the authentication API.
    """

    def __init__(
        self,
        settings: AuthSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the verifier.

        Args:
            settings: Authentication API settings.
            client: Shared HTTP client. One is created per call if omitted.
        """
        self._settings = settings or AuthSettings()
        self._client = client

    @property
    def base_url(self) -> str:
        return self._settings.url.rstrip("/")

    async def verify(self, token: str) -> Identity | None:
        """Resolve a token to an identity.

        Raises:
            TokenVerificationError: If the API is unreachable or answers
                with an unexpected status or body.
        """
        if not token:
            return None

        url = f"{self.base_url}/me"
        headers = {"Authorization": f"Bearer {token}"}
        try:
            if self._client is not None:
                response = await self._client.get(url, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._settings.timeout) as client:
                    response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise TokenVerificationError(f"Token verification request failed: {str(e)}") from e

        if response.status_code in (401, 403):
            logger.debug("Token rejected by authentication API (%d)", response.status_code)
            return None

        if response.status_code != 200:
            raise TokenVerificationError(
                f"Unexpected status from authentication API: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            # Either the bare user record or {"user": {...}}
            record = data.get("user", data) if isinstance(data, dict) else None
            if not isinstance(record, dict):
                raise ValueError("User record must be an object")
            return Identity.from_dict(record)
        except (ValueError, KeyError) as e:
            raise TokenVerificationError(f"Invalid user record: {str(e)}", status_code=200) from e
