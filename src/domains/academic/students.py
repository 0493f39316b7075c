# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student account management for supervisors.

Creating a student writes the academic record, registers a login account
and emails the credentials. The email is best effort: a delivery failure
is logged and the account stays created.
"""

import logging

from src.domains.academic.models import Student
from src.domains.academic.repository import AcademicRepository
from src.domains.academic.service import AcademicServiceError, AccessDeniedError, require_admin
from src.domains.auth.service import AccountExistsError, AuthService
from src.infrastructure.notifications.email import EmailMessage, MailDeliveryError, SmtpMailer
from src.infrastructure.realtime.session import Identity, Role

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

CREDENTIALS_SUBJECT = "Your ScholarSync Account Credentials"
REMINDER_SUBJECT = "ScholarSync Account Credentials Reminder"


class StudentExistsError(AcademicServiceError):
    """Raised when another student already uses the email address."""

    pass


def _normalize_email(email: str) -> str:
    email = email.strip().lower()
    if "@" not in email:
        raise ValueError(f"Invalid email address: {email}")
    return email


def _check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


class StudentService:
    """Create, edit and remove doctoral student accounts.

    Attributes:
        repository: Academic record storage.
        accounts: Login account directory, if managed in process.
        mailer: Outgoing mail for credentials.
    """

    def __init__(
        self,
        repository: AcademicRepository,
        accounts: AuthService | None = None,
        mailer: SmtpMailer | None = None,
    ) -> None:
        self.repository = repository
        self.accounts = accounts
        self.mailer = mailer or SmtpMailer()

    async def list_students(self, identity: Identity) -> list[Student]:
        require_admin(identity, "list students")
        return await self.repository.list_students()

    async def get_student(self, identity: Identity, student_id: str) -> Student:
        """Fetch a student record; students may only read their own."""
        if identity.is_student and identity.user_id != student_id:
            raise AccessDeniedError("Students can only view their own profile")
        return await self.repository.get_student(student_id)

    async def create_student(
        self,
        identity: Identity,
        name: str,
        email: str,
        password: str,
        domain: str | None = None,
    ) -> Student:
        """Create a student and email them their credentials.

        Args:
            identity: Acting supervisor.
            name: Student's display name.
            email: Login and contact address.
            password: Initial password, at least six characters.
            domain: Research domain.

        Returns:
            The stored student.

        Raises:
            AccessDeniedError: If the caller is not a supervisor.
            ValueError: If the name is blank, the email invalid or the
                password too short.
            StudentExistsError: If the email is already in use.
        """
        require_admin(identity, "create students")
        name = name.strip()
        if not name:
            raise ValueError("Student name cannot be empty")
        email = _normalize_email(email)
        _check_password(password)
        await self._ensure_email_free(email)

        student = Student(name=name, email=email, domain=domain)
        if self.accounts is not None:
            try:
                self.accounts.register(self._identity_for(student), password)
            except AccountExistsError as e:
                raise StudentExistsError(f"Email {email} is already in use") from e

        await self.repository.add_student(student)
        logger.info("Student %s created by %s", student.id, identity.user_id)

        await self._deliver(
            EmailMessage(
                to=student.email,
                subject=CREDENTIALS_SUBJECT,
                body=(
                    f"Hello {student.name},\n\n"
                    "Your account has been created.\n"
                    f"Email: {student.email}\n"
                    f"Password: {password}\n\n"
                    "Please log in to ScholarSync.\n\n"
                    "Regards,\nYour Supervisor"
                ),
            )
        )
        return student

    async def update_student(
        self,
        identity: Identity,
        student_id: str,
        *,
        name: str | None = None,
        email: str | None = None,
        domain: str | None = None,
        password: str | None = None,
    ) -> Student:
        """Edit a student's details. Omitted fields are left unchanged.

        Raises:
            AccessDeniedError: If the caller is not a supervisor.
            ValueError: If a new value is invalid.
            StudentExistsError: If the new email belongs to another student.
            RecordNotFoundError: If the student does not exist.
        """
        require_admin(identity, "edit students")
        student = await self.repository.get_student(student_id)

        changes: dict = {}
        if name is not None:
            if not name.strip():
                raise ValueError("Student name cannot be empty")
            changes["name"] = name.strip()
        if email is not None:
            email = _normalize_email(email)
            if email != student.email:
                await self._ensure_email_free(email)
            changes["email"] = email
        if domain is not None:
            changes["domain"] = domain
        if password:
            _check_password(password)

        updated = student.model_copy(update=changes)
        if self.accounts is not None and self.accounts.find_account(student_id) is not None:
            try:
                self.accounts.update_account(
                    student_id,
                    identity=self._identity_for(updated),
                    password=password or None,
                )
            except AccountExistsError as e:
                raise StudentExistsError(f"Email {updated.email} is already in use") from e

        await self.repository.update_student(updated)
        logger.info("Student %s updated by %s", student_id, identity.user_id)
        return updated

    async def delete_student(self, identity: Identity, student_id: str) -> None:
        """Remove a student, unassign their articles and close their account.

        Raises:
            AccessDeniedError: If the caller is not a supervisor.
            RecordNotFoundError: If the student does not exist.
        """
        require_admin(identity, "delete students")
        await self.repository.delete_student(student_id)
        if self.accounts is not None:
            self.accounts.remove_account(student_id)
        logger.info("Student %s deleted by %s", student_id, identity.user_id)

    async def send_credentials_reminder(self, identity: Identity, student_id: str) -> bool:
        """Email a student a reminder of their login address.

        Returns:
            True if the email was sent, False if email is not configured.

        Raises:
            AccessDeniedError: If the caller is not a supervisor.
            RecordNotFoundError: If the student does not exist.
            MailDeliveryError: If the SMTP server refuses the message.
        """
        require_admin(identity, "send credential reminders")
        student = await self.repository.get_student(student_id)
        return await self.mailer.send(
            EmailMessage(
                to=student.email,
                subject=REMINDER_SUBJECT,
                body=(
                    f"Hello {student.name},\n\n"
                    "This is a reminder of your account details.\n"
                    f"Email: {student.email}\n\n"
                    "Please contact your supervisor if you have forgotten your password.\n\n"
                    "Regards,\nYour Supervisor"
                ),
            )
        )

    async def _ensure_email_free(self, email: str) -> None:
        for existing in await self.repository.list_students():
            if existing.email.lower() == email:
                raise StudentExistsError(f"Email {email} is already in use")

    async def _deliver(self, message: EmailMessage) -> bool:
        try:
            return await self.mailer.send(message)
        except MailDeliveryError as e:
            logger.warning("Credentials email to %s not delivered: %s", e.recipient, str(e))
            return False

    @staticmethod
    def _identity_for(student: Student) -> Identity:
        return Identity(
            user_id=student.id,
            display_name=student.name,
            role=Role.STUDENT,
            domain=student.domain,
            email=student.email,
        )
