# src/narratopia/web/routes/chapters.py
"""Chapter, ordering and version endpoints."""

from uuid import UUID

from fastapi import APIRouter

from narratopia.canon import chapters, versions
from narratopia.models import (
    Chapter,
    ChapterCreate,
    ChapterReorder,
    ChapterSummary,
    ChapterUpdate,
    DataResponse,
    ListResponse,
    MessageResponse,
    RestoreResult,
    Version,
    VersionCreate,
    VersionSummary,
)
from narratopia.web.deps import CallerDep, SessionDep

router = APIRouter(prefix="/api", tags=["chapters"])


@router.get("/projects/{project_id}/chapters", response_model=ListResponse[ChapterSummary])
async def get_chapters(project_id: UUID, session: SessionDep, caller_id: CallerDep):
    result = await chapters.list_chapters(session, project_id, caller_id)
    return ListResponse.from_result(result)


@router.post(
    "/projects/{project_id}/chapters",
    response_model=DataResponse[Chapter],
    status_code=201,
)
async def create_chapter(
    project_id: UUID, payload: ChapterCreate, session: SessionDep, caller_id: CallerDep
):
    chapter = await chapters.create_chapter(session, project_id, caller_id, payload)
    return DataResponse(data=chapter)


@router.put(
    "/projects/{project_id}/chapters/reorder",
    response_model=ListResponse[ChapterSummary],
)
async def reorder_chapters(
    project_id: UUID, payload: ChapterReorder, session: SessionDep, caller_id: CallerDep
):
    result = await chapters.reorder_chapters(
        session, project_id, caller_id, payload.chapter_order
    )
    return ListResponse.from_result(result)


@router.get("/chapters/{chapter_id}", response_model=DataResponse[Chapter])
async def get_chapter(chapter_id: UUID, session: SessionDep, caller_id: CallerDep):
    return DataResponse(data=await chapters.get_chapter(session, chapter_id, caller_id))


@router.put("/chapters/{chapter_id}", response_model=DataResponse[Chapter])
async def update_chapter(
    chapter_id: UUID, patch: ChapterUpdate, session: SessionDep, caller_id: CallerDep
):
    chapter = await chapters.update_chapter(session, chapter_id, caller_id, patch)
    return DataResponse(data=chapter)


@router.delete("/chapters/{chapter_id}", response_model=MessageResponse)
async def delete_chapter(chapter_id: UUID, session: SessionDep, caller_id: CallerDep):
    await chapters.delete_chapter(session, chapter_id, caller_id)
    return MessageResponse(message="Chapter deleted successfully")


@router.get("/chapters/{chapter_id}/versions", response_model=ListResponse[VersionSummary])
async def get_versions(chapter_id: UUID, session: SessionDep, caller_id: CallerDep):
    result = await versions.list_versions(session, chapter_id, caller_id)
    return ListResponse.from_result(result)


@router.post(
    "/chapters/{chapter_id}/versions",
    response_model=DataResponse[Version],
    status_code=201,
)
async def create_version(
    chapter_id: UUID,
    session: SessionDep,
    caller_id: CallerDep,
    payload: VersionCreate | None = None,
):
    description = payload.description if payload else None
    version = await versions.create_version(session, chapter_id, caller_id, description)
    return DataResponse(data=version)


@router.get("/versions/{version_id}", response_model=DataResponse[Version])
async def get_version(version_id: UUID, session: SessionDep, caller_id: CallerDep):
    return DataResponse(data=await versions.get_version(session, version_id, caller_id))


@router.post("/versions/{version_id}/restore", response_model=DataResponse[RestoreResult])
async def restore_version(version_id: UUID, session: SessionDep, caller_id: CallerDep):
    result = await versions.restore_version(session, version_id, caller_id)
    return DataResponse(message="Chapter restored to selected version", data=result)
