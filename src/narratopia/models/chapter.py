# src/narratopia/models/chapter.py
"""Data models for manuscript chapters."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field, field_validator

from .base_model import NarratopiaBaseModel as BaseModel
from .content import ChapterContent
from .mixins import ProjectScopedMixin, TimestampsMixin
from .validators import validate_non_empty


class ChapterCreate(BaseModel):
    """Payload for a new chapter; its position is assigned by the store."""

    title: str = Field(..., min_length=1, max_length=100)
    content: ChapterContent | None = None
    notes: str | None = None

    @field_validator("title")
    @classmethod
    def _validate_title(cls, v: str) -> str:
        return validate_non_empty(v)


class ChapterUpdate(BaseModel):
    """Partial update; only fields explicitly sent are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=100)
    content: ChapterContent | None = None
    notes: str | None = None
    is_complete: bool | None = None


class ChapterSummary(ProjectScopedMixin, TimestampsMixin):
    """Chapter listing entry without its content payload."""

    title: str
    order_index: int = Field(..., ge=1)
    word_count: int = Field(default=0, ge=0)
    is_complete: bool = False
    notes: str | None = None


class Chapter(ChapterSummary):
    """Full chapter including content."""

    content: ChapterContent | None = None


class ChapterReorder(BaseModel):
    """Complete desired order of a project's chapters, first to last."""

    chapter_order: list[UUID]


__all__ = ["ChapterCreate", "ChapterUpdate", "ChapterSummary", "Chapter", "ChapterReorder"]
