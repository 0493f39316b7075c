# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Account email delivery using async SMTP.

Supervisors create student accounts from the client; the student receives
their credentials by email. Messages are plain text and sent with
aiosmtplib.

Configuration (via environment variables, see SmtpSettings):
- SMTP_HOST, SMTP_PORT: SMTP server
- SMTP_USERNAME, SMTP_PASSWORD: SMTP authentication
- SMTP_USE_TLS: Use STARTTLS (default: true)
- SMTP_FROM_EMAIL, SMTP_FROM_NAME: Sender
"""

import logging
from dataclasses import dataclass
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid

import aiosmtplib

from src.core.config.settings import SmtpSettings, get_settings

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised when the SMTP server refuses or cannot be reached."""

    def __init__(self, message: str, recipient: str) -> None:
        self.recipient = recipient
        super().__init__(message)


@dataclass(frozen=True)
class EmailMessage:
    """A plain-text email."""

    to: str
    subject: str
    body: str


class SmtpMailer:
    """Sends account emails through the configured SMTP server."""

    def __init__(self, settings: SmtpSettings | None = None) -> None:
        self.settings = settings or get_settings().smtp
        self._warned = False

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    async def send(self, message: EmailMessage) -> bool:
        """Send one email.

        Args:
            message: The email to send.

        Returns:
            True if the server accepted the message, False if email is
            not configured.

        Raises:
            MailDeliveryError: If the SMTP exchange fails.
        """
        if not self.is_configured:
            if not self._warned:
                logger.warning(
                    "Email delivery disabled: SMTP_HOST, SMTP_USERNAME, "
                    "SMTP_PASSWORD, or SMTP_FROM_EMAIL not set"
                )
                self._warned = True
            logger.info("Skipping email to %s: %s", message.to, message.subject)
            return False

        mime = self._build_message(message)
        try:
            await aiosmtplib.send(
                mime,
                hostname=self.settings.host,
                port=self.settings.port,
                username=self.settings.username,
                password=self.settings.password.get_secret_value(),
                start_tls=self.settings.use_tls,
                timeout=self.settings.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", message.to, str(e), exc_info=True)
            raise MailDeliveryError(f"SMTP error: {str(e)}", recipient=message.to) from e

        logger.info("Email sent to %s: %s", message.to, message.subject)
        return True

    def _build_message(self, message: EmailMessage) -> MIMEText:
        mime = MIMEText(message.body, "plain", "utf-8")
        mime["From"] = formataddr((self.settings.from_name, self.settings.from_email))
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime["Message-ID"] = make_msgid(domain=self.settings.from_email.split("@")[-1])
        return mime
