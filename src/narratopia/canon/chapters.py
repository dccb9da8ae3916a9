# src/narratopia/canon/chapters.py
"""Chapter storage and the per-project ordering they maintain.

Every project's chapters carry a 1-based, gap-free ``order_index``. All
operations that move indices (insert, delete, reorder) take the project
lock first and commit in a single transaction, so readers never see a
half-renumbered project.

Renumbering happens in two set-based statements: affected rows are first
parked on negative indices, then flipped back to their final positive
values. The unique ``(project_id, order_index)`` constraint therefore holds
after every individual row update, whatever order the database applies
them in.
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from narratopia.canon.db import lock_project, write_transaction
from narratopia.canon.projects import check_project_ownership
from narratopia.core.exceptions import BadRequestError, NotFoundError
from narratopia.core.logging import get_logger
from narratopia.core.wordcount import count_words
from narratopia.models import (
    Chapter,
    ChapterCreate,
    ChapterSQL,
    ChapterSummary,
    ChapterUpdate,
    ChapterVersionSQL,
    ListResult,
)
from narratopia.models.content import content_to_storage

logger = get_logger(__name__)


async def load_owned_chapter(
    session: AsyncSession, chapter_id: UUID, caller_id: UUID
) -> ChapterSQL:
    """Return the chapter row after checking the caller owns its project."""

    chapter = await session.get(ChapterSQL, chapter_id)
    if chapter is None:
        raise NotFoundError("Chapter not found", details={"chapter_id": str(chapter_id)})
    await check_project_ownership(session, chapter.project_id, caller_id)
    return chapter


async def _chapter_summaries(session: AsyncSession, project_id: UUID) -> list[ChapterSummary]:
    result = await session.execute(
        select(ChapterSQL)
        .where(ChapterSQL.project_id == project_id)
        .order_by(ChapterSQL.order_index)
        .execution_options(populate_existing=True)
    )
    return [ChapterSummary.model_validate(row) for row in result.scalars().all()]


async def _next_order_index(session: AsyncSession, project_id: UUID) -> int:
    highest = await session.scalar(
        select(func.max(ChapterSQL.order_index)).where(ChapterSQL.project_id == project_id)
    )
    return (highest or 0) + 1


async def _close_gap(session: AsyncSession, project_id: UUID, removed_index: int) -> int:
    """Shift every chapter above ``removed_index`` down by one."""

    parked = await session.execute(
        update(ChapterSQL)
        .where(
            ChapterSQL.project_id == project_id,
            ChapterSQL.order_index > removed_index,
        )
        .values(order_index=-(ChapterSQL.order_index - 1))
        .execution_options(synchronize_session=False)
    )
    await _unpark(session, project_id)
    return parked.rowcount


async def _unpark(session: AsyncSession, project_id: UUID) -> None:
    await session.execute(
        update(ChapterSQL)
        .where(ChapterSQL.project_id == project_id, ChapterSQL.order_index < 0)
        .values(order_index=-ChapterSQL.order_index)
        .execution_options(synchronize_session=False)
    )


async def list_chapters(
    session: AsyncSession, project_id: UUID, caller_id: UUID
) -> ListResult[ChapterSummary]:
    """Return the project's chapters in reading order, without content."""

    await check_project_ownership(session, project_id, caller_id)
    return ListResult.of(await _chapter_summaries(session, project_id))


async def create_chapter(
    session: AsyncSession, project_id: UUID, caller_id: UUID, payload: ChapterCreate
) -> Chapter:
    """Append a chapter at position ``N + 1``."""

    async with write_transaction(session, "creating chapter"):
        await check_project_ownership(session, project_id, caller_id)
        await lock_project(session, project_id)
        order_index = await _next_order_index(session, project_id)
        chapter = ChapterSQL(
            project_id=project_id,
            title=payload.title,
            content=content_to_storage(payload.content),
            notes=payload.notes,
            order_index=order_index,
            word_count=count_words(payload.content),
            is_complete=False,
        )
        session.add(chapter)
        await session.flush()

    logger.info(
        "Created chapter",
        extra={
            "project_id": str(project_id),
            "chapter_id": str(chapter.id),
            "order_index": order_index,
        },
    )
    return Chapter.model_validate(chapter)


async def get_chapter(session: AsyncSession, chapter_id: UUID, caller_id: UUID) -> Chapter:
    chapter = await load_owned_chapter(session, chapter_id, caller_id)
    return Chapter.model_validate(chapter)


async def update_chapter(
    session: AsyncSession, chapter_id: UUID, caller_id: UUID, patch: ChapterUpdate
) -> Chapter:
    """Apply the fields present in ``patch``; new content refreshes the word count.

    Position changes go through :func:`reorder_chapters`.
    """

    sent = patch.model_fields_set
    async with write_transaction(session, "updating chapter"):
        chapter = await load_owned_chapter(session, chapter_id, caller_id)
        if "title" in sent and patch.title is not None:
            chapter.title = patch.title
        if "content" in sent:
            chapter.content = content_to_storage(patch.content)
            chapter.word_count = count_words(patch.content)
        if "notes" in sent:
            chapter.notes = patch.notes
        if "is_complete" in sent and patch.is_complete is not None:
            chapter.is_complete = patch.is_complete
        await session.flush()

    logger.info(
        "Updated chapter",
        extra={"chapter_id": str(chapter_id), "fields": sorted(sent)},
    )
    return Chapter.model_validate(chapter)


async def delete_chapter(session: AsyncSession, chapter_id: UUID, caller_id: UUID) -> None:
    """Delete a chapter and its versions, then close the gap it leaves."""

    async with write_transaction(session, "deleting chapter"):
        chapter = await load_owned_chapter(session, chapter_id, caller_id)
        project_id = chapter.project_id
        await lock_project(session, project_id)
        # The index may have moved, or the row gone, while we waited for the lock.
        removed_index = await session.scalar(
            select(ChapterSQL.order_index).where(ChapterSQL.id == chapter_id)
        )
        if removed_index is None:
            raise NotFoundError(
                "Chapter not found", details={"chapter_id": str(chapter_id)}
            )

        versions = await session.execute(
            delete(ChapterVersionSQL).where(ChapterVersionSQL.chapter_id == chapter_id)
        )
        await session.execute(delete(ChapterSQL).where(ChapterSQL.id == chapter_id))
        shifted = await _close_gap(session, project_id, removed_index)

    logger.info(
        "Deleted chapter",
        extra={
            "project_id": str(project_id),
            "chapter_id": str(chapter_id),
            "order_index": removed_index,
            "versions_deleted": versions.rowcount,
            "chapters_shifted": shifted,
        },
    )


async def reorder_chapters(
    session: AsyncSession,
    project_id: UUID,
    caller_id: UUID,
    chapter_order: Sequence[UUID],
) -> ListResult[ChapterSummary]:
    """Give the chapter at position ``i`` of ``chapter_order`` index ``i + 1``.

    Ids that do not belong to the project are skipped (their positions are
    still counted). Chapters left out of ``chapter_order`` keep their old
    index; if that collides with a reassigned one the whole reorder is
    rejected and nothing changes.
    """

    async with write_transaction(session, "reordering chapters"):
        await check_project_ownership(session, project_id, caller_id)
        await lock_project(session, project_id)
        known = set(
            (
                await session.scalars(
                    select(ChapterSQL.id).where(ChapterSQL.project_id == project_id)
                )
            ).all()
        )
        positions: dict[UUID, int] = {}
        for index, chapter_id in enumerate(chapter_order):
            if chapter_id in known:
                positions[chapter_id] = index + 1

        if positions:
            await session.execute(
                update(ChapterSQL)
                .where(
                    ChapterSQL.project_id == project_id,
                    ChapterSQL.id.in_(list(positions)),
                )
                .values(
                    order_index=case(
                        *[
                            (ChapterSQL.id == chapter_id, -position)
                            for chapter_id, position in positions.items()
                        ],
                        else_=ChapterSQL.order_index,
                    )
                )
                .execution_options(synchronize_session=False)
            )
            try:
                await _unpark(session, project_id)
            except IntegrityError as exc:
                raise BadRequestError(
                    "Chapter order would produce duplicate positions; "
                    "supply every chapter of the project",
                    details={"project_id": str(project_id)},
                ) from exc

    skipped = len(chapter_order) - len(positions)
    logger.info(
        "Reordered chapters",
        extra={
            "project_id": str(project_id),
            "reordered": len(positions),
            "skipped": skipped,
        },
    )
    return ListResult.of(await _chapter_summaries(session, project_id))


__all__ = [
    "load_owned_chapter",
    "list_chapters",
    "create_chapter",
    "get_chapter",
    "update_chapter",
    "delete_chapter",
    "reorder_chapters",
]
