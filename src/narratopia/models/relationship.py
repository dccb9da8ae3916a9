# src/narratopia/models/relationship.py
"""Data models for the codex relationship graph."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator

from .base_model import NarratopiaBaseModel as BaseModel
from .mixins import IDMixin, ProjectScopedMixin
from .validators import validate_non_empty

DEFAULT_STRENGTH = 5
UNKNOWN_ENTITY_NAME = "Unknown Entity"
UNKNOWN_ENTITY_TYPE = "unknown"


class Direction(str, Enum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"


class RelationshipCreate(BaseModel):
    """Payload for a new edge, optionally paired with an inverse edge."""

    source_id: UUID
    target_id: UUID
    type: str = Field(..., min_length=1)
    description: str | None = None
    strength: int = Field(default=DEFAULT_STRENGTH, ge=1, le=10)
    create_inverse: bool = False
    inverse_type: str | None = None

    @field_validator("type")
    @classmethod
    def _validate_type(cls, v: str) -> str:
        return validate_non_empty(v)

    @field_validator("strength", mode="before")
    @classmethod
    def _default_strength(cls, v: object) -> object:
        return DEFAULT_STRENGTH if v is None else v

    @field_validator("inverse_type")
    @classmethod
    def _blank_inverse_type(cls, v: str | None) -> str | None:
        return v or None


class RelationshipUpdate(BaseModel):
    """Mutable fields of an edge; endpoints are fixed at creation."""

    type: str | None = Field(default=None, min_length=1)
    description: str | None = None
    strength: int | None = Field(default=None, ge=1, le=10)


class EntityRef(BaseModel):
    """Resolved display data for an edge endpoint."""

    id: UUID
    name: str
    type: str


class Relationship(ProjectScopedMixin):
    """Edge enriched with both endpoints."""

    source_id: UUID
    target_id: UUID
    type: str
    description: str | None = None
    strength: int = DEFAULT_STRENGTH
    source: EntityRef
    target: EntityRef
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RelationshipPair(BaseModel):
    relationship: Relationship
    inverse_relationship: Relationship | None = None


class EntityRelationship(IDMixin):
    """Edge seen from one of its endpoints."""

    type: str
    direction: Direction
    description: str | None = None
    strength: int = DEFAULT_STRENGTH
    entity: EntityRef


class NetworkNode(BaseModel):
    id: UUID
    label: str
    group: str
    title: str


class NetworkEdge(BaseModel):
    """Visualization edge using vis-network keys.

    ``title`` is the hover tooltip (description, falling back to the type)
    and ``value`` is the drawn weight (the relationship strength).
    """

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    from_: UUID = Field(..., alias="from")
    to: UUID
    label: str
    title: str
    value: int


class NetworkGraph(BaseModel):
    nodes: list[NetworkNode] = Field(default_factory=list)
    edges: list[NetworkEdge] = Field(default_factory=list)


__all__ = [
    "DEFAULT_STRENGTH",
    "UNKNOWN_ENTITY_NAME",
    "UNKNOWN_ENTITY_TYPE",
    "Direction",
    "RelationshipCreate",
    "RelationshipUpdate",
    "EntityRef",
    "Relationship",
    "RelationshipPair",
    "EntityRelationship",
    "NetworkNode",
    "NetworkEdge",
    "NetworkGraph",
]
