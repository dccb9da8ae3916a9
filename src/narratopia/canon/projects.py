# src/narratopia/canon/projects.py
"""Project ownership checks and the project-wide cascade."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from narratopia.canon.db import lock_project, write_transaction
from narratopia.core.exceptions import ForbiddenError, NotFoundError
from narratopia.core.logging import get_logger
from narratopia.models import (
    ChapterSQL,
    ChapterVersionSQL,
    CodexEntitySQL,
    ProjectSQL,
    RelationshipSQL,
)

logger = get_logger(__name__)


async def check_project_ownership(
    session: AsyncSession, project_id: UUID, caller_id: UUID
) -> ProjectSQL:
    """Return the project if ``caller_id`` owns it.

    Raises :class:`NotFoundError` when the project does not exist and
    :class:`ForbiddenError` when it belongs to someone else.
    """

    project = await session.get(ProjectSQL, project_id)
    if project is None:
        raise NotFoundError("Project not found", details={"project_id": str(project_id)})
    if project.user_id != caller_id:
        raise ForbiddenError(
            "Not authorized to access this project",
            details={"project_id": str(project_id)},
        )
    return project


async def delete_project(session: AsyncSession, project_id: UUID, caller_id: UUID) -> None:
    """Delete a project with its chapters, versions, entities and relationships."""

    async with write_transaction(session, "deleting project"):
        await check_project_ownership(session, project_id, caller_id)
        await lock_project(session, project_id)
        versions = await session.execute(
            delete(ChapterVersionSQL).where(ChapterVersionSQL.project_id == project_id)
        )
        chapters = await session.execute(
            delete(ChapterSQL).where(ChapterSQL.project_id == project_id)
        )
        relationships = await session.execute(
            delete(RelationshipSQL).where(RelationshipSQL.project_id == project_id)
        )
        entities = await session.execute(
            delete(CodexEntitySQL).where(CodexEntitySQL.project_id == project_id)
        )
        await session.execute(delete(ProjectSQL).where(ProjectSQL.id == project_id))

    logger.info(
        "Deleted project",
        extra={
            "project_id": str(project_id),
            "chapters_deleted": chapters.rowcount,
            "versions_deleted": versions.rowcount,
            "entities_deleted": entities.rowcount,
            "relationships_deleted": relationships.rowcount,
        },
    )


__all__ = ["check_project_ownership", "delete_project"]
