# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-memory academic repository.

One instance is created per process and injected into the services.
Records are copied on the way in and out so callers never share state
with the store.
"""

import logging
from datetime import timedelta

from src.domains.academic.models import Article, Comment, Report, Student
from src.domains.academic.repository import AcademicRepository, RecordNotFoundError
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class InMemoryAcademicRepository(AcademicRepository):
    """Dictionary-backed repository."""

    def __init__(self) -> None:
        self._students: dict[str, Student] = {}
        self._articles: dict[str, Article] = {}
        self._reports: dict[str, Report] = {}

    @classmethod
    def seeded(cls) -> "InMemoryAcademicRepository":
        """Repository holding a small demo data set."""
        repo = cls()
        now = utc_now()
        students = [
            Student(id="2", name="Alice Smith", email="alice@example.com", domain="Computer Science"),
            Student(id="3", name="Bob Johnson", email="bob@example.com", domain="Physics"),
            Student(id="4", name="Charlie Brown", email="charlie@example.com", domain="Mathematics"),
        ]
        articles = [
            Article(
                id="art1",
                title="Introduction to Quantum Computing",
                content="A comprehensive overview...",
                file_path="/files/quantum_intro.pdf",
                assigned_to="2",
            ),
            Article(
                id="art2",
                title="Deep Learning Architectures",
                content="Exploring CNNs, RNNs, and Transformers.",
                file_path="/files/deep_learning.pdf",
                created_at=now - timedelta(days=1),
                updated_at=now - timedelta(days=1),
            ),
            Article(
                id="art3",
                title="String Theory Basics",
                content="Fundamental concepts of string theory.",
                file_path="/files/string_theory.pdf",
                assigned_to="3",
                created_at=now - timedelta(days=2),
            ),
        ]
        reports = [
            Report(
                id="rep1",
                article_id="art1",
                student_id="2",
                title="report_quantum.pdf",
                file_path="/files/report_quantum.pdf",
                comments=[
                    Comment(
                        id="c1",
                        report_id="rep1",
                        author_id="1",
                        author_name="Admin User",
                        text="Good start, but need more details on qubit implementation.",
                        created_at=now - timedelta(days=1),
                    )
                ],
                created_at=now - timedelta(days=2),
                updated_at=now - timedelta(days=1),
            ),
            Report(
                id="rep2",
                article_id="art3",
                student_id="3",
                title="report_string.docx",
                file_path="/files/report_string.docx",
            ),
        ]
        for student in students:
            repo._students[student.id] = student
        for article in articles:
            repo._articles[article.id] = article
        for report in reports:
            repo._reports[report.id] = report
        return repo

    async def add_student(self, student: Student) -> Student:
        self._students[student.id] = student.model_copy(deep=True)
        return student

    async def get_student(self, student_id: str) -> Student:
        return self._get(self._students, "Student", student_id)

    async def list_students(self) -> list[Student]:
        return [s.model_copy(deep=True) for s in self._students.values()]

    async def update_student(self, student: Student) -> Student:
        self._get(self._students, "Student", student.id)
        self._students[student.id] = student.model_copy(deep=True)
        return student

    async def delete_student(self, student_id: str) -> None:
        self._get(self._students, "Student", student_id)
        del self._students[student_id]
        # Unassign their articles
        for article_id, article in self._articles.items():
            if article.assigned_to == student_id:
                self._articles[article_id] = article.model_copy(
                    update={"assigned_to": None, "updated_at": utc_now()}
                )

    async def add_article(self, article: Article) -> Article:
        self._articles[article.id] = article.model_copy(deep=True)
        return article

    async def get_article(self, article_id: str) -> Article:
        return self._get(self._articles, "Article", article_id)

    async def list_articles(self, assigned_to: str | None = None) -> list[Article]:
        return [
            a.model_copy(deep=True)
            for a in self._articles.values()
            if assigned_to is None or a.assigned_to == assigned_to
        ]

    async def update_article(self, article: Article) -> Article:
        self._get(self._articles, "Article", article.id)
        self._articles[article.id] = article.model_copy(deep=True)
        return article

    async def delete_article(self, article_id: str) -> None:
        self._get(self._articles, "Article", article_id)
        del self._articles[article_id]

    async def add_report(self, report: Report) -> Report:
        self._reports[report.id] = report.model_copy(deep=True)
        return report

    async def get_report(self, report_id: str) -> Report:
        return self._get(self._reports, "Report", report_id)

    async def list_reports(self, student_id: str | None = None) -> list[Report]:
        return [
            r.model_copy(deep=True)
            for r in self._reports.values()
            if student_id is None or r.student_id == student_id
        ]

    async def update_report(self, report: Report) -> Report:
        stored = self._get(self._reports, "Report", report.id)
        updated = report.model_copy(update={"comments": stored.comments}, deep=True)
        self._reports[report.id] = updated
        return updated.model_copy(deep=True)

    async def delete_report(self, report_id: str) -> None:
        self._get(self._reports, "Report", report_id)
        del self._reports[report_id]

    async def add_comment(self, comment: Comment) -> Comment:
        report = self._get(self._reports, "Report", comment.report_id)
        report.comments.append(comment.model_copy(deep=True))
        report.updated_at = utc_now()
        self._reports[report.id] = report
        return comment

    async def list_comments(self, report_id: str) -> list[Comment]:
        return self._get(self._reports, "Report", report_id).comments

    async def delete_comment(self, report_id: str, comment_id: str) -> None:
        report = self._get(self._reports, "Report", report_id)
        remaining = [c for c in report.comments if c.id != comment_id]
        if len(remaining) == len(report.comments):
            raise RecordNotFoundError("Comment", comment_id)
        report.comments = remaining
        self._reports[report.id] = report

    @staticmethod
    def _get(table: dict, kind: str, record_id: str):
        record = table.get(record_id)
        if record is None:
            raise RecordNotFoundError(kind, record_id)
        return record.model_copy(deep=True)
