# src/narratopia/models/codex.py
"""Models for codex entities (characters, locations, items, events, concepts)."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from .base_model import NarratopiaBaseModel as BaseModel
from .mixins import ProjectScopedMixin, TimestampsMixin
from .validators import validate_attribute_bag, validate_non_empty, validate_string_list


class EntityType(str, Enum):
    """Closed set of codex entity categories."""

    CHARACTER = "character"
    LOCATION = "location"
    ITEM = "item"
    EVENT = "event"
    CONCEPT = "concept"

    @classmethod
    def parse_many(cls, values: Iterable[str] | str | None) -> list[EntityType]:
        """Parse a list (or comma-separated string) of types, dropping unknown ones."""

        if values is None:
            return []
        if isinstance(values, str):
            values = values.split(",")
        parsed: list[EntityType] = []
        for raw in values:
            cleaned = raw.strip().lower()
            for member in cls:
                if cleaned == member.value and member not in parsed:
                    parsed.append(member)
        return parsed


class _EntityFields(BaseModel):
    @field_validator("attributes", mode="before", check_fields=False)
    @classmethod
    def _validate_attributes(cls, v: Any) -> Any:
        if v is None:
            return v
        return validate_attribute_bag(v)

    @field_validator("images", "tags", check_fields=False)
    @classmethod
    def _validate_lists(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return validate_string_list(v)


class EntityCreate(_EntityFields):
    type: EntityType
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _validate_type(cls, v: Any) -> Any:
        if isinstance(v, EntityType):
            return v
        parsed = EntityType.parse_many([v]) if isinstance(v, str) else []
        if not parsed:
            allowed = ", ".join(member.value for member in EntityType)
            raise ValueError(f"Entity type must be one of: {allowed}")
        return parsed[0]

    @field_validator("name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        return validate_non_empty(v)


class EntityUpdate(_EntityFields):
    """Partial update; ``type`` is fixed at creation."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    attributes: dict[str, Any] | None = None
    images: list[str] | None = None
    tags: list[str] | None = None


class CodexEntity(ProjectScopedMixin, TimestampsMixin):
    type: EntityType
    name: str
    description: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class EntitySearchHit(ProjectScopedMixin):
    """Compact search result."""

    type: EntityType
    name: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)


__all__ = ["EntityType", "EntityCreate", "EntityUpdate", "CodexEntity", "EntitySearchHit"]
