"""Pydantic and SQLAlchemy models for the manuscript store."""

from .base import Base  # Import SQLAlchemy Base
from .base_model import NarratopiaBaseModel
from .chapter import Chapter, ChapterCreate, ChapterReorder, ChapterSummary, ChapterUpdate
from .codex import CodexEntity, EntityCreate, EntitySearchHit, EntityType, EntityUpdate
from .content import BlockDocument, ChapterContent, ContentBlock, PlainText
from .mixins import IDMixin, ProjectScopedMixin, TimestampsMixin
from .relationship import (
    Direction,
    EntityRef,
    EntityRelationship,
    NetworkEdge,
    NetworkGraph,
    NetworkNode,
    Relationship,
    RelationshipCreate,
    RelationshipPair,
    RelationshipUpdate,
)
from .responses import DataResponse, ErrorResponse, ListResponse, ListResult, MessageResponse
from .sqlalchemy_models import (
    ChapterSQL,
    ChapterVersionSQL,
    CodexEntitySQL,
    ProjectSQL,
    RelationshipSQL,
)
from .version import RestoreResult, Version, VersionCreate, VersionSummary

__all__ = [
    "NarratopiaBaseModel",
    "IDMixin",
    "ProjectScopedMixin",
    "TimestampsMixin",
    "PlainText",
    "ContentBlock",
    "BlockDocument",
    "ChapterContent",
    "Chapter",
    "ChapterCreate",
    "ChapterUpdate",
    "ChapterSummary",
    "ChapterReorder",
    "Version",
    "VersionCreate",
    "VersionSummary",
    "RestoreResult",
    "EntityType",
    "CodexEntity",
    "EntityCreate",
    "EntityUpdate",
    "EntitySearchHit",
    "Direction",
    "EntityRef",
    "Relationship",
    "RelationshipCreate",
    "RelationshipUpdate",
    "RelationshipPair",
    "EntityRelationship",
    "NetworkNode",
    "NetworkEdge",
    "NetworkGraph",
    "ListResult",
    "DataResponse",
    "ListResponse",
    "MessageResponse",
    "ErrorResponse",
    "Base",  # Export SQLAlchemy Base
    "ProjectSQL",
    "ChapterSQL",
    "ChapterVersionSQL",
    "CodexEntitySQL",
    "RelationshipSQL",
]
