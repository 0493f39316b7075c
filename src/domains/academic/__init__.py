# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic domain: students, articles, reports and supervisor comments.

Services perform a mutation through the repository, then announce it on
the event channel through the outbound emitter. StudentService manages
student login accounts and emails their credentials.
"""

from src.domains.academic.memory import InMemoryAcademicRepository
from src.domains.academic.models import Article, Comment, Report, Student
from src.domains.academic.repository import AcademicRepository, RecordNotFoundError
from src.domains.academic.service import (
    AcademicServiceError,
    AccessDeniedError,
    ArticleService,
    CommentService,
    ReportService,
)
from src.domains.academic.students import StudentExistsError, StudentService

__all__ = [
    "AcademicRepository",
    "AcademicServiceError",
    "AccessDeniedError",
    "Article",
    "ArticleService",
    "Comment",
    "CommentService",
    "InMemoryAcademicRepository",
    "RecordNotFoundError",
    "Report",
    "ReportService",
    "Student",
    "StudentExistsError",
    "StudentService",
]
