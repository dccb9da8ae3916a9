# src/narratopia/models/mixins.py
"""Common reusable mixin models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from .base_model import NarratopiaBaseModel


class IDMixin(NarratopiaBaseModel):
    """Mixin that provides the persisted identifier."""

    id: UUID


class ProjectScopedMixin(IDMixin):
    """Records that live inside a single project."""

    project_id: UUID


class TimestampsMixin(NarratopiaBaseModel):
    """Mixin that adds creation and update timestamps."""

    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = ["IDMixin", "ProjectScopedMixin", "TimestampsMixin"]
