# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic services for articles, reports and comments.

Each mutating operation writes through the repository first and then
announces the change on the event channel. Repository errors propagate to
the caller and nothing is emitted. An emit that cannot be delivered is
reported to the user by the emitter and does not undo the mutation.
"""

import logging

from src.domains.academic.models import Article, Comment, Report
from src.domains.academic.repository import AcademicRepository
from src.infrastructure.events import (
    ArticleAssigned,
    ArticleConsulted,
    CommentAdded,
    ReportUploaded,
)
from src.infrastructure.realtime.emitter import OutboundEmitter
from src.infrastructure.realtime.session import Identity
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class AcademicServiceError(Exception):
    """Base exception for academic service errors."""

    pass


class AccessDeniedError(AcademicServiceError):
    """Raised when a user acts outside their role or on another student's records."""

    pass


def require_admin(identity: Identity, action: str) -> None:
    if not identity.is_admin:
        raise AccessDeniedError(f"Only supervisors can {action}")


def require_student(identity: Identity, action: str) -> None:
    if not identity.is_student:
        raise AccessDeniedError(f"Only students can {action}")


class ArticleService:
    """Article management and consultation.

    Attributes:
        repository: Academic record storage.
        emitter: Outbound event emitter.
    """

    def __init__(self, repository: AcademicRepository, emitter: OutboundEmitter) -> None:
        self.repository = repository
        self.emitter = emitter

    async def create_article(
        self,
        identity: Identity,
        title: str,
        content: str = "",
        file_path: str | None = None,
    ) -> Article:
        """Create an unassigned article.

        Raises:
            AccessDeniedError: If the caller is not a supervisor.
        """
        require_admin(identity, "create articles")
        article = await self.repository.add_article(
            Article(title=title, content=content, file_path=file_path)
        )
        logger.info("Article %s created by %s", article.id, identity.user_id)
        return article

    async def update_article(
        self,
        identity: Identity,
        article_id: str,
        *,
        title: str | None = None,
        content: str | None = None,
        file_path: str | None = None,
        remove_file: bool = False,
    ) -> Article:
        """Edit an article's title, content or attached file.

        The assignment is left unchanged and nothing is emitted.

        Raises:
            AccessDeniedError: If the caller is not a supervisor.
            ValueError: If the new title is blank.
            RecordNotFoundError: If the article does not exist.
        """
        require_admin(identity, "edit articles")
        article = await self.repository.get_article(article_id)

        changes: dict = {"updated_at": utc_now()}
        if title is not None:
            if not title.strip():
                raise ValueError("Article title cannot be empty")
            changes["title"] = title.strip()
        if content is not None:
            changes["content"] = content
        if remove_file:
            changes["file_path"] = None
        elif file_path is not None:
            changes["file_path"] = file_path

        updated = await self.repository.update_article(article.model_copy(update=changes))
        logger.info("Article %s updated by %s", article_id, identity.user_id)
        return updated

    async def assign_article(
        self,
        identity: Identity,
        article_id: str,
        student_id: str | None,
    ) -> Article:
        """Assign an article to a student, or unassign it.

        ArticleAssigned is emitted only when the article ends up assigned.

        Args:
            identity: Acting supervisor.
            article_id: Article to assign.
            student_id: Target student, or None to unassign.

        Returns:
            The updated article.

        Raises:
            AccessDeniedError: If the caller is not a supervisor.
            RecordNotFoundError: If the article or student does not exist.
        """
        require_admin(identity, "assign articles")
        article = await self.repository.get_article(article_id)
        if student_id is not None:
            await self.repository.get_student(student_id)

        updated = await self.repository.update_article(
            article.model_copy(update={"assigned_to": student_id, "updated_at": utc_now()})
        )
        logger.info("Article %s assigned to %s", article_id, student_id or "nobody")

        if student_id is not None:
            await self.emitter.publish(
                ArticleAssigned(
                    student_id=student_id,
                    article_id=updated.id,
                    article_title=updated.title,
                )
            )
        return updated

    async def consult_article(self, identity: Identity, article_id: str) -> Article:
        """Open an article and tell supervisors who is reading it.

        Raises:
            AccessDeniedError: If a student opens an article not assigned to them.
            RecordNotFoundError: If the article does not exist.
        """
        article = await self.repository.get_article(article_id)
        if identity.is_student and article.assigned_to != identity.user_id:
            raise AccessDeniedError(f"Article {article_id} is not assigned to you")

        await self.emitter.publish(
            ArticleConsulted(
                user_id=identity.user_id,
                user_name=identity.display_name,
                article_id=article.id,
                article_title=article.title,
            )
        )
        return article

    async def list_articles_for(self, identity: Identity) -> list[Article]:
        """All articles for supervisors, assigned ones for students."""
        if identity.is_admin:
            return await self.repository.list_articles()
        return await self.repository.list_articles(assigned_to=identity.user_id)

    async def delete_article(self, identity: Identity, article_id: str) -> None:
        require_admin(identity, "delete articles")
        await self.repository.delete_article(article_id)
        logger.info("Article %s deleted by %s", article_id, identity.user_id)


class ReportService:
    """Report submission and retrieval."""

    def __init__(self, repository: AcademicRepository, emitter: OutboundEmitter) -> None:
        self.repository = repository
        self.emitter = emitter

    async def upload_report(
        self,
        identity: Identity,
        article_id: str,
        title: str | None = None,
        content: str | None = None,
        file_path: str | None = None,
    ) -> Report:
        """Submit a report on an assigned article.

        Args:
            identity: Submitting student.
            article_id: Article the report is about.
            title: Report title; defaults to "Text Report".
            content: Text content, when not a file.
            file_path: Uploaded file location.

        Returns:
            The stored report.

        Raises:
            AccessDeniedError: If the caller is not a student or the article
                is not assigned to them.
            ValueError: If neither content nor file_path is given.
            RecordNotFoundError: If the article does not exist.
        """
        require_student(identity, "upload reports")
        if not content and not file_path:
            raise ValueError("A report needs text content or a file")

        article = await self.repository.get_article(article_id)
        if article.assigned_to != identity.user_id:
            raise AccessDeniedError(f"Article {article_id} is not assigned to you")

        report = await self.repository.add_report(
            Report(
                article_id=article.id,
                student_id=identity.user_id,
                title=title or "Text Report",
                content=content,
                file_path=file_path,
            )
        )
        logger.info("Report %s uploaded by %s", report.id, identity.user_id)

        await self.emitter.publish(
            ReportUploaded(
                student_id=identity.user_id,
                student_name=identity.display_name,
                article_id=article.id,
                article_title=article.title,
                report_id=report.id,
                report_title=report.title,
            )
        )
        return report

    async def get_report_for(self, identity: Identity, report_id: str) -> Report:
        """Fetch a report the caller may see.

        Raises:
            AccessDeniedError: If a student asks for another student's report.
            RecordNotFoundError: If the report does not exist.
        """
        report = await self.repository.get_report(report_id)
        if identity.is_student and report.student_id != identity.user_id:
            raise AccessDeniedError(f"Report {report_id} belongs to another student")
        return report

    async def list_reports_for(self, identity: Identity) -> list[Report]:
        if identity.is_admin:
            return await self.repository.list_reports()
        return await self.repository.list_reports(student_id=identity.user_id)

    async def revise_report(
        self,
        identity: Identity,
        report_id: str,
        title: str | None = None,
        content: str | None = None,
        file_path: str | None = None,
    ) -> Report:
        """Replace the submission of one of the caller's reports.

        Supervisors are told through ReportUploaded, as for a first upload.
        Existing comments stay on the report.

        Raises:
            AccessDeniedError: If the caller is not the report's author.
            ValueError: If neither content nor file_path is given.
            RecordNotFoundError: If the report or its article does not exist.
        """
        require_student(identity, "revise reports")
        if not content and not file_path:
            raise ValueError("A report needs text content or a file")

        report = await self.repository.get_report(report_id)
        if report.student_id != identity.user_id:
            raise AccessDeniedError(f"Report {report_id} belongs to another student")
        article = await self.repository.get_article(report.article_id)

        updated = await self.repository.update_report(
            report.model_copy(
                update={
                    "title": title or report.title,
                    "content": content,
                    "file_path": file_path,
                    "updated_at": utc_now(),
                }
            )
        )
        logger.info("Report %s revised by %s", report_id, identity.user_id)

        await self.emitter.publish(
            ReportUploaded(
                student_id=identity.user_id,
                student_name=identity.display_name,
                article_id=article.id,
                article_title=article.title,
                report_id=updated.id,
                report_title=updated.title,
            )
        )
        return updated

    async def delete_report(self, identity: Identity, report_id: str) -> None:
        require_admin(identity, "delete reports")
        await self.repository.delete_report(report_id)
        logger.info("Report %s deleted by %s", report_id, identity.user_id)


class CommentService:
    """Supervisor comments on reports."""

    def __init__(self, repository: AcademicRepository, emitter: OutboundEmitter) -> None:
        self.repository = repository
        self.emitter = emitter

    async def add_comment(self, identity: Identity, report_id: str, text: str) -> Comment:
        """Comment on a report and notify its author.

        Raises:
            AccessDeniedError: If the caller is not a supervisor.
            ValueError: If the text is blank.
            RecordNotFoundError: If the report does not exist.
        """
        require_admin(identity, "comment on reports")
        text = text.strip()
        if not text:
            raise ValueError("Comment cannot be empty")

        report = await self.repository.get_report(report_id)
        comment = await self.repository.add_comment(
            Comment(
                report_id=report.id,
                author_id=identity.user_id,
                author_name=identity.display_name,
                text=text,
            )
        )
        logger.info("Comment %s added to report %s", comment.id, report.id)

        await self.emitter.publish(
            CommentAdded(
                report_id=report.id,
                article_id=report.article_id,
                student_id=report.student_id,
                comment_text=text,
            )
        )
        return comment

    async def list_comments(self, identity: Identity, report_id: str) -> list[Comment]:
        """Comments on a report the caller may see, oldest first.

        Raises:
            AccessDeniedError: If a student asks about another student's report.
            RecordNotFoundError: If the report does not exist.
        """
        if identity.is_student:
            report = await self.repository.get_report(report_id)
            if report.student_id != identity.user_id:
                raise AccessDeniedError(f"Report {report_id} belongs to another student")
        return await self.repository.list_comments(report_id)

    async def delete_comment(self, identity: Identity, report_id: str, comment_id: str) -> None:
        require_admin(identity, "delete comments")
        await self.repository.delete_comment(report_id, comment_id)
        logger.info("Comment %s removed from report %s", comment_id, report_id)
