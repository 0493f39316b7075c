# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic records."""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field

from src.utils.datetime import utc_now


def new_id(prefix: str) -> str:
    """Short record id such as "art3f9a1c"."""
    return f"{prefix}{uuid4().hex[:6]}"


class Student(BaseModel):
    """A doctoral student."""

    id: str = Field(default_factory=lambda: new_id("u"))
    name: str
    email: str
    domain: str | None = None


class Article(BaseModel):
    """A research article, optionally assigned to one student."""

    id: str = Field(default_factory=lambda: new_id("art"))
    title: str
    content: str = ""
    file_path: str | None = None
    assigned_to: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Comment(BaseModel):
    """Supervisor feedback on a report."""

    id: str = Field(default_factory=lambda: new_id("c"))
    report_id: str
    author_id: str
    author_name: str
    text: str
    created_at: datetime = Field(default_factory=utc_now)


class Report(BaseModel):
    """A student's report on an assigned article."""

    id: str = Field(default_factory=lambda: new_id("rep"))
    article_id: str
    student_id: str
    title: str
    content: str | None = None
    file_path: str | None = None
    comments: list[Comment] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
