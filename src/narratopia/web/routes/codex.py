# src/narratopia/web/routes/codex.py
"""Codex entity endpoints."""

from uuid import UUID

from fastapi import APIRouter

from narratopia.canon import codex, relationships
from narratopia.models import (
    CodexEntity,
    DataResponse,
    EntityCreate,
    EntityRelationship,
    EntitySearchHit,
    EntityType,
    EntityUpdate,
    ListResponse,
    MessageResponse,
)
from narratopia.web.deps import CallerDep, SessionDep

router = APIRouter(prefix="/api", tags=["codex"])


def _split(value: str | None) -> list[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


@router.get("/projects/{project_id}/codex", response_model=ListResponse[CodexEntity])
async def get_entities(
    project_id: UUID,
    session: SessionDep,
    caller_id: CallerDep,
    type: str | None = None,
    search: str | None = None,
    tags: str | None = None,
):
    # Unknown types are ignored rather than rejected.
    parsed = EntityType.parse_many(type) if type else []
    result = await codex.list_entities(
        session,
        project_id,
        caller_id,
        type=parsed[0] if parsed else None,
        search=search,
        tags=_split(tags),
    )
    return ListResponse.from_result(result)


@router.post(
    "/projects/{project_id}/codex",
    response_model=DataResponse[CodexEntity],
    status_code=201,
)
async def create_entity(
    project_id: UUID, payload: EntityCreate, session: SessionDep, caller_id: CallerDep
):
    return DataResponse(data=await codex.create_entity(session, project_id, caller_id, payload))


@router.get(
    "/projects/{project_id}/codex/search", response_model=ListResponse[EntitySearchHit]
)
async def search_entities(
    project_id: UUID,
    session: SessionDep,
    caller_id: CallerDep,
    query: str | None = None,
    types: str | None = None,
):
    result = await codex.search_entities(
        session, project_id, caller_id, query or "", _split(types)
    )
    return ListResponse.from_result(result)


@router.get("/codex/{entity_id}", response_model=DataResponse[CodexEntity])
async def get_entity(entity_id: UUID, session: SessionDep, caller_id: CallerDep):
    return DataResponse(data=await codex.get_entity(session, entity_id, caller_id))


@router.put("/codex/{entity_id}", response_model=DataResponse[CodexEntity])
async def update_entity(
    entity_id: UUID, patch: EntityUpdate, session: SessionDep, caller_id: CallerDep
):
    return DataResponse(data=await codex.update_entity(session, entity_id, caller_id, patch))


@router.delete("/codex/{entity_id}", response_model=MessageResponse)
async def delete_entity(entity_id: UUID, session: SessionDep, caller_id: CallerDep):
    await codex.delete_entity(session, entity_id, caller_id)
    return MessageResponse(message="Codex entity deleted successfully")


@router.get(
    "/codex/{entity_id}/relationships", response_model=ListResponse[EntityRelationship]
)
async def get_entity_relationships(entity_id: UUID, session: SessionDep, caller_id: CallerDep):
    result = await relationships.get_entity_relationships(session, entity_id, caller_id)
    return ListResponse.from_result(result)
