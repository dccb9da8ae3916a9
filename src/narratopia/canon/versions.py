# src/narratopia/canon/versions.py
"""Append-only chapter snapshots and restore-with-auto-save."""

from __future__ import annotations

import copy
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from narratopia.canon.chapters import load_owned_chapter
from narratopia.canon.db import write_transaction
from narratopia.canon.projects import check_project_ownership
from narratopia.core.exceptions import NotFoundError
from narratopia.core.logging import get_logger
from narratopia.models import (
    Chapter,
    ChapterSQL,
    ChapterVersionSQL,
    ListResult,
    RestoreResult,
    Version,
    VersionSummary,
)
from narratopia.models.sqlalchemy_models import utcnow
from narratopia.models.version import AUTO_SAVE_DESCRIPTION

logger = get_logger(__name__)


def default_description() -> str:
    return f"Snapshot created on {utcnow():%Y-%m-%d}"


def _snapshot(session: AsyncSession, chapter: ChapterSQL, description: str) -> ChapterVersionSQL:
    version = ChapterVersionSQL(
        project_id=chapter.project_id,
        chapter_id=chapter.id,
        content=copy.deepcopy(chapter.content),
        word_count=chapter.word_count or 0,
        description=description,
        created_at=utcnow(),
    )
    session.add(version)
    return version


async def create_version(
    session: AsyncSession,
    chapter_id: UUID,
    caller_id: UUID,
    description: str | None = None,
) -> Version:
    """Capture the chapter's current content and word count."""

    async with write_transaction(session, "creating version"):
        chapter = await load_owned_chapter(session, chapter_id, caller_id)
        version = _snapshot(session, chapter, description or default_description())
        await session.flush()

    logger.info(
        "Created version",
        extra={"chapter_id": str(chapter_id), "version_id": str(version.id)},
    )
    return Version.model_validate(version)


async def list_versions(
    session: AsyncSession, chapter_id: UUID, caller_id: UUID
) -> ListResult[VersionSummary]:
    """Return the chapter's versions, newest first, without content."""

    await load_owned_chapter(session, chapter_id, caller_id)
    result = await session.execute(
        select(ChapterVersionSQL)
        .where(ChapterVersionSQL.chapter_id == chapter_id)
        .order_by(ChapterVersionSQL.created_at.desc())
    )
    return ListResult.of(
        [VersionSummary.model_validate(row) for row in result.scalars().all()]
    )


async def _load_owned_version(
    session: AsyncSession, version_id: UUID, caller_id: UUID
) -> ChapterVersionSQL:
    version = await session.get(ChapterVersionSQL, version_id)
    if version is None:
        raise NotFoundError("Version not found", details={"version_id": str(version_id)})
    await check_project_ownership(session, version.project_id, caller_id)
    return version


async def get_version(session: AsyncSession, version_id: UUID, caller_id: UUID) -> Version:
    version = await _load_owned_version(session, version_id, caller_id)
    return Version.model_validate(version)


async def restore_version(
    session: AsyncSession, version_id: UUID, caller_id: UUID
) -> RestoreResult:
    """Put a version's content back on its chapter.

    The chapter's current state is saved as a new version first, so a
    restore can itself be undone. The restored version is left as it is.
    """

    async with write_transaction(session, "restoring version"):
        version = await _load_owned_version(session, version_id, caller_id)
        chapter = await session.get(ChapterSQL, version.chapter_id)
        if chapter is None:
            raise NotFoundError(
                "Associated chapter not found",
                details={"chapter_id": str(version.chapter_id)},
            )
        safety = _snapshot(session, chapter, AUTO_SAVE_DESCRIPTION)
        chapter.content = copy.deepcopy(version.content)
        chapter.word_count = version.word_count
        await session.flush()

    logger.info(
        "Restored chapter to version",
        extra={
            "chapter_id": str(chapter.id),
            "version_id": str(version_id),
            "auto_saved_version_id": str(safety.id),
        },
    )
    return RestoreResult(
        chapter=Chapter.model_validate(chapter),
        auto_saved_version=VersionSummary.model_validate(safety),
    )


__all__ = [
    "default_description",
    "create_version",
    "list_versions",
    "get_version",
    "restore_version",
]
