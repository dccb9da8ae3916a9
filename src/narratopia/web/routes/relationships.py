# src/narratopia/web/routes/relationships.py
"""Relationship graph endpoints."""

from uuid import UUID

from fastapi import APIRouter

from narratopia.canon import relationships
from narratopia.models import (
    DataResponse,
    ListResponse,
    MessageResponse,
    NetworkGraph,
    Relationship,
    RelationshipCreate,
    RelationshipPair,
    RelationshipUpdate,
)
from narratopia.web.deps import CallerDep, SessionDep

router = APIRouter(prefix="/api", tags=["relationships"])


@router.get(
    "/projects/{project_id}/relationships", response_model=ListResponse[Relationship]
)
async def get_relationships(project_id: UUID, session: SessionDep, caller_id: CallerDep):
    result = await relationships.list_relationships(session, project_id, caller_id)
    return ListResponse.from_result(result)


@router.post(
    "/projects/{project_id}/relationships",
    response_model=DataResponse[RelationshipPair],
    status_code=201,
)
async def create_relationship(
    project_id: UUID,
    payload: RelationshipCreate,
    session: SessionDep,
    caller_id: CallerDep,
):
    pair = await relationships.create_relationship(session, project_id, caller_id, payload)
    return DataResponse(data=pair)


@router.get(
    "/projects/{project_id}/relationships/network",
    response_model=DataResponse[NetworkGraph],
)
async def get_network(
    project_id: UUID,
    session: SessionDep,
    caller_id: CallerDep,
    types: str | None = None,
):
    graph = await relationships.get_network(session, project_id, caller_id, types)
    return DataResponse(data=graph)


@router.get("/relationships/{relationship_id}", response_model=DataResponse[Relationship])
async def get_relationship(relationship_id: UUID, session: SessionDep, caller_id: CallerDep):
    edge = await relationships.get_relationship(session, relationship_id, caller_id)
    return DataResponse(data=edge)


@router.put("/relationships/{relationship_id}", response_model=DataResponse[Relationship])
async def update_relationship(
    relationship_id: UUID,
    patch: RelationshipUpdate,
    session: SessionDep,
    caller_id: CallerDep,
):
    edge = await relationships.update_relationship(session, relationship_id, caller_id, patch)
    return DataResponse(data=edge)


@router.delete("/relationships/{relationship_id}", response_model=MessageResponse)
async def delete_relationship(
    relationship_id: UUID, session: SessionDep, caller_id: CallerDep
):
    await relationships.delete_relationship(session, relationship_id, caller_id)
    return MessageResponse(message="Relationship deleted successfully")
