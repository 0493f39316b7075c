# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the
ScholarSync client. Settings are loaded from environment variables
with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.realtime.url)
    'ws://localhost:6001/ws'
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RealtimeSettings(BaseSettings):
    """Event channel configuration for the messaging backend.

    Attributes:
        url: WebSocket URL of the messaging backend.
        open_timeout: Seconds allowed for the transport to open.
        handshake_timeout: Seconds allowed for the auth handshake reply.
        ping_interval: Keepalive ping interval in seconds (None disables).
        close_timeout: Seconds allowed for a graceful close.
    """

    model_config = SettingsConfigDict(
        env_prefix="REALTIME_",
        extra="ignore",
    )

    url: str = "ws://localhost:6001/ws"
    open_timeout: float = 10.0
    handshake_timeout: float = 10.0
    ping_interval: float | None = 20.0
    close_timeout: float = 5.0


class SessionSettings(BaseSettings):
    """Session persistence and role routing configuration.

    Attributes:
        storage_path: JSON file used as durable client storage.
        storage_key: Key under which the credential token is stored.
        login_route: Route shown after logout.
        admin_home: Landing route for administrators.
        student_home: Landing route for students.
        entry_routes: Unauthenticated routes that trigger a role redirect.
    """

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        extra="ignore",
    )

    storage_path: Path = Path.home() / ".scholarsync" / "storage.json"
    storage_key: str = "authToken"
    login_route: str = "/login"
    admin_home: str = "/admin/dashboard"
    student_home: str = "/student/dashboard"
    entry_routes: list[str] = ["/", "/login", "/signup"]


class AuthSettings(BaseSettings):
    """Token verification service configuration.

    Attributes:
        url: Base URL of the authentication API.
        timeout: Request timeout in seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        extra="ignore",
    )

    url: str = "http://localhost:8000/api/auth"
    timeout: float = 10.0


class ActivitySettings(BaseSettings):
    """Dashboard activity feed configuration.

    Attributes:
        max_entries: Number of recent activity records kept.
    """

    model_config = SettingsConfigDict(
        env_prefix="ACTIVITY_",
        extra="ignore",
    )

    max_entries: int = Field(default=10, ge=1)


class SmtpSettings(BaseSettings):
    """Outgoing mail configuration for account emails.

    Email is disabled until host, username, password and from_email are set.

    Attributes:
        host: SMTP server hostname.
        port: SMTP server port.
        username: SMTP authentication username.
        password: SMTP authentication password.
        use_tls: Use STARTTLS.
        from_email: Sender email address.
        from_name: Sender display name.
        timeout: Seconds allowed for the SMTP exchange.
    """

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        extra="ignore",
    )

    host: str | None = None
    port: int = 587
    username: str | None = None
    password: SecretStr | None = None
    use_tls: bool = True
    from_email: str | None = None
    from_name: str = "ScholarSync"
    timeout: float = 30.0

    @property
    def is_configured(self) -> bool:
        return all([self.host, self.username, self.password, self.from_email])


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        realtime: Event channel settings.
        session: Session persistence settings.
        auth: Token verification settings.
        activity: Activity feed settings.
        smtp: Outgoing mail settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    realtime: RealtimeSettings = Field(default_factory=RealtimeSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    activity: ActivitySettings = Field(default_factory=ActivitySettings)
    smtp: SmtpSettings = Field(default_factory=SmtpSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production against an unencrypted channel.
        """
        if self.environment == "production" and self.realtime.url.startswith("ws://"):
            raise ValueError(
                "Realtime channel must use wss:// in production. "
                "Set REALTIME_URL environment variable."
            )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
