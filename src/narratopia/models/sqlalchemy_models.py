# src/narratopia/models/sqlalchemy_models.py
"""SQLAlchemy ORM models for the manuscript store."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


def utcnow() -> datetime:
    return datetime.now(UTC)


class ProjectSQL(Base):
    """A writing project owned by a single user.

    Project CRUD belongs to the surrounding system; the row is kept here so
    ownership checks and cascades can be resolved against it.
    """

    __tablename__ = "project"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    title = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class ChapterSQL(Base):
    """An ordered unit of manuscript content.

    ``order_index`` is 1-based and contiguous within a project; the unique
    constraint on ``(project_id, order_index)`` backs that up at the storage
    level. ``content`` holds either a JSON string (plain text) or a
    ``{"blocks": [...]}`` document, and ``word_count`` is derived from it.
    """

    __tablename__ = "chapter"
    __table_args__ = (
        UniqueConstraint("project_id", "order_index", name="uq_chapter_project_order"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(
        Uuid, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(100), nullable=False)
    order_index = Column(Integer, nullable=False)
    content = Column(JSON, nullable=True)
    word_count = Column(Integer, nullable=False, default=0)
    is_complete = Column(Boolean, nullable=False, default=False)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class ChapterVersionSQL(Base):
    """Immutable snapshot of a chapter's content.

    ``project_id`` is copied from the chapter so ownership can be checked
    without loading it. Rows are never updated; they disappear only with
    their chapter.
    """

    __tablename__ = "chapter_version"
    __table_args__ = (Index("ix_chapter_version_chapter_created", "chapter_id", "created_at"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(
        Uuid, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    chapter_id = Column(
        Uuid, ForeignKey("chapter.id", ondelete="CASCADE"), nullable=False
    )
    content = Column(JSON, nullable=True)
    word_count = Column(Integer, nullable=False, default=0)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class CodexEntitySQL(Base):
    """A named narrative object: character, location, item, event or concept.

    ``attributes`` is an open map validated at the model boundary;
    ``images`` and ``tags`` are JSON lists of strings.
    """

    __tablename__ = "codex_entity"
    __table_args__ = (Index("ix_codex_entity_project_type", "project_id", "type"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(
        Uuid, ForeignKey("project.id", ondelete="CASCADE"), nullable=False
    )
    type = Column(String(20), nullable=False)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    attributes: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class RelationshipSQL(Base):
    """Directed, typed edge between two codex entities of the same project.

    The same pair of entities may be linked several times only under
    different ``type`` labels. An inverse edge created alongside another is
    an ordinary independent row.
    """

    __tablename__ = "relationship"
    __table_args__ = (
        UniqueConstraint(
            "project_id",
            "source_id",
            "target_id",
            "type",
            name="uq_relationship_project_source_target_type",
        ),
        CheckConstraint("strength >= 1 AND strength <= 10", name="strength_range"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(
        Uuid, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    source_id = Column(
        Uuid, ForeignKey("codex_entity.id", ondelete="CASCADE"), nullable=False, index=True
    )
    target_id = Column(
        Uuid, ForeignKey("codex_entity.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(Text, nullable=False)
    description = Column(Text)
    strength = Column(Integer, nullable=False, default=5)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


__all__ = [
    "ProjectSQL",
    "ChapterSQL",
    "ChapterVersionSQL",
    "CodexEntitySQL",
    "RelationshipSQL",
    "utcnow",
]
