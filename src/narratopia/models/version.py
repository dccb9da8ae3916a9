# src/narratopia/models/version.py
"""Data models for chapter version snapshots."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from .base_model import NarratopiaBaseModel as BaseModel
from .chapter import Chapter
from .content import ChapterContent
from .mixins import ProjectScopedMixin

AUTO_SAVE_DESCRIPTION = "Auto-saved before version restore"


class VersionCreate(BaseModel):
    description: str | None = None


class VersionSummary(ProjectScopedMixin):
    """Version listing entry; content is fetched through the single-version lookup."""

    chapter_id: UUID
    word_count: int = Field(default=0, ge=0)
    description: str | None = None
    created_at: datetime | None = None


class Version(VersionSummary):
    """Immutable snapshot of a chapter's content."""

    content: ChapterContent | None = None


class RestoreResult(BaseModel):
    """Outcome of a restore: the rewritten chapter and its safety snapshot."""

    chapter: Chapter
    auto_saved_version: VersionSummary


__all__ = [
    "AUTO_SAVE_DESCRIPTION",
    "VersionCreate",
    "VersionSummary",
    "Version",
    "RestoreResult",
]
