# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Storage interface for academic records.

The data backend is an external collaborator. Services depend on this
interface and get an implementation injected at construction.
"""

from abc import ABC, abstractmethod

from src.domains.academic.models import Article, Comment, Report, Student


class RecordNotFoundError(Exception):
    """Raised when a record does not exist."""

    def __init__(self, kind: str, record_id: str) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


class AcademicRepository(ABC):
    """CRUD for students, articles, reports and comments.

    Methods that take the id of an existing record (get, update, delete,
    and comment access by report) raise RecordNotFoundError for unknown ids.
    """

    @abstractmethod
    async def add_student(self, student: Student) -> Student: ...

    @abstractmethod
    async def get_student(self, student_id: str) -> Student: ...

    @abstractmethod
    async def list_students(self) -> list[Student]: ...

    @abstractmethod
    async def update_student(self, student: Student) -> Student: ...

    @abstractmethod
    async def delete_student(self, student_id: str) -> None: ...

    @abstractmethod
    async def add_article(self, article: Article) -> Article: ...

    @abstractmethod
    async def get_article(self, article_id: str) -> Article: ...

    @abstractmethod
    async def list_articles(self, assigned_to: str | None = None) -> list[Article]:
        """Articles, optionally only those assigned to one student."""
        ...

    @abstractmethod
    async def update_article(self, article: Article) -> Article: ...

    @abstractmethod
    async def delete_article(self, article_id: str) -> None: ...

    @abstractmethod
    async def add_report(self, report: Report) -> Report: ...

    @abstractmethod
    async def get_report(self, report_id: str) -> Report: ...

    @abstractmethod
    async def list_reports(self, student_id: str | None = None) -> list[Report]:
        """Reports, optionally only those of one student."""
        ...

    @abstractmethod
    async def update_report(self, report: Report) -> Report:
        """Replace a report. Its comments are kept as stored."""
        ...

    @abstractmethod
    async def delete_report(self, report_id: str) -> None: ...

    @abstractmethod
    async def add_comment(self, comment: Comment) -> Comment:
        """Attach a comment to its report."""
        ...

    @abstractmethod
    async def list_comments(self, report_id: str) -> list[Comment]:
        """Comments on a report, oldest first."""
        ...

    @abstractmethod
    async def delete_comment(self, report_id: str, comment_id: str) -> None: ...
