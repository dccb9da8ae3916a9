# src/narratopia/canon/relationships.py
"""Directed, typed, weighted relationships between codex entities.

Edges are unique per ``(project, source, target, type)``. An inverse edge
requested at creation time is stored as a second, fully independent row:
nothing links the pair afterwards, so updating or deleting one never
touches the other.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from narratopia.canon.codex import load_owned_entity, resolve_entity
from narratopia.canon.db import write_transaction
from narratopia.canon.projects import check_project_ownership
from narratopia.core.exceptions import BadRequestError, NotFoundError
from narratopia.core.logging import get_logger
from narratopia.models import (
    CodexEntitySQL,
    Direction,
    EntityRef,
    EntityRelationship,
    ListResult,
    NetworkEdge,
    NetworkGraph,
    NetworkNode,
    Relationship,
    RelationshipCreate,
    RelationshipPair,
    RelationshipSQL,
    RelationshipUpdate,
)
from narratopia.models.relationship import UNKNOWN_ENTITY_NAME, UNKNOWN_ENTITY_TYPE

logger = get_logger(__name__)

DUPLICATE_MESSAGE = "This relationship already exists"
DUPLICATE_INVERSE_MESSAGE = "The inverse relationship already exists"


def _ref(entity: CodexEntitySQL) -> EntityRef:
    return EntityRef(id=entity.id, name=entity.name, type=entity.type)


def _placeholder(entity_id: UUID) -> EntityRef:
    return EntityRef(id=entity_id, name=UNKNOWN_ENTITY_NAME, type=UNKNOWN_ENTITY_TYPE)


async def _entity_refs(session: AsyncSession, entity_ids: Iterable[UUID]) -> dict[UUID, EntityRef]:
    ids = set(entity_ids)
    if not ids:
        return {}
    result = await session.execute(
        select(CodexEntitySQL.id, CodexEntitySQL.name, CodexEntitySQL.type).where(
            CodexEntitySQL.id.in_(ids)
        )
    )
    return {row.id: EntityRef(id=row.id, name=row.name, type=row.type) for row in result}


def _view(edge: RelationshipSQL, refs: dict[UUID, EntityRef]) -> Relationship:
    return Relationship(
        id=edge.id,
        project_id=edge.project_id,
        source_id=edge.source_id,
        target_id=edge.target_id,
        type=edge.type,
        description=edge.description,
        strength=edge.strength,
        source=refs.get(edge.source_id) or _placeholder(edge.source_id),
        target=refs.get(edge.target_id) or _placeholder(edge.target_id),
        created_at=edge.created_at,
        updated_at=edge.updated_at,
    )


async def _enriched(session: AsyncSession, edge: RelationshipSQL) -> Relationship:
    refs = await _entity_refs(session, (edge.source_id, edge.target_id))
    return _view(edge, refs)


async def _triple_exists(
    session: AsyncSession, project_id: UUID, source_id: UUID, target_id: UUID, type: str
) -> bool:
    found = await session.scalar(
        select(RelationshipSQL.id).where(
            RelationshipSQL.project_id == project_id,
            RelationshipSQL.source_id == source_id,
            RelationshipSQL.target_id == target_id,
            RelationshipSQL.type == type,
        )
    )
    return found is not None


async def _insert_edge(
    session: AsyncSession,
    project_id: UUID,
    source_id: UUID,
    target_id: UUID,
    type: str,
    description: str | None,
    strength: int,
    duplicate_message: str,
) -> RelationshipSQL:
    if await _triple_exists(session, project_id, source_id, target_id, type):
        raise BadRequestError(
            duplicate_message,
            details={
                "source_id": str(source_id),
                "target_id": str(target_id),
                "type": type,
            },
        )
    edge = RelationshipSQL(
        project_id=project_id,
        source_id=source_id,
        target_id=target_id,
        type=type,
        description=description,
        strength=strength,
    )
    session.add(edge)
    try:
        await session.flush()
    except IntegrityError as exc:
        # Lost a race with a concurrent insert of the same triple.
        raise BadRequestError(duplicate_message) from exc
    return edge


async def load_owned_relationship(
    session: AsyncSession, relationship_id: UUID, caller_id: UUID
) -> RelationshipSQL:
    edge = await session.get(RelationshipSQL, relationship_id)
    if edge is None:
        raise NotFoundError(
            "Relationship not found", details={"relationship_id": str(relationship_id)}
        )
    await check_project_ownership(session, edge.project_id, caller_id)
    return edge


async def create_relationship(
    session: AsyncSession, project_id: UUID, caller_id: UUID, payload: RelationshipCreate
) -> RelationshipPair:
    """Create an edge and, if requested, its inverse in one transaction.

    The inverse swaps source and target and uses ``inverse_type`` when
    given, otherwise the same type. Each edge is checked against the
    uniqueness triple on its own; if either is a duplicate nothing is saved.
    """

    async with write_transaction(session, "creating relationship"):
        await check_project_ownership(session, project_id, caller_id)
        source = await resolve_entity(session, payload.source_id, project_id, "Source entity")
        target = await resolve_entity(session, payload.target_id, project_id, "Target entity")

        edge = await _insert_edge(
            session,
            project_id,
            source.id,
            target.id,
            payload.type,
            payload.description,
            payload.strength,
            DUPLICATE_MESSAGE,
        )
        inverse = None
        if payload.create_inverse:
            inverse = await _insert_edge(
                session,
                project_id,
                target.id,
                source.id,
                payload.inverse_type or payload.type,
                payload.description,
                payload.strength,
                DUPLICATE_INVERSE_MESSAGE,
            )

    logger.info(
        "Created relationship",
        extra={
            "project_id": str(project_id),
            "relationship_id": str(edge.id),
            "inverse_relationship_id": str(inverse.id) if inverse else None,
            "relationship_type": edge.type,
        },
    )
    refs = {source.id: _ref(source), target.id: _ref(target)}
    return RelationshipPair(
        relationship=_view(edge, refs),
        inverse_relationship=_view(inverse, refs) if inverse else None,
    )


async def list_relationships(
    session: AsyncSession, project_id: UUID, caller_id: UUID
) -> ListResult[Relationship]:
    """Return every edge of the project with both endpoints resolved.

    Endpoints that no longer resolve are shown as an "Unknown Entity"
    placeholder instead of failing the listing.
    """

    await check_project_ownership(session, project_id, caller_id)
    result = await session.execute(
        select(RelationshipSQL)
        .where(RelationshipSQL.project_id == project_id)
        .order_by(RelationshipSQL.created_at)
    )
    edges = list(result.scalars().all())
    refs = await _entity_refs(
        session, {e.source_id for e in edges} | {e.target_id for e in edges}
    )
    return ListResult.of([_view(e, refs) for e in edges])


async def get_relationship(
    session: AsyncSession, relationship_id: UUID, caller_id: UUID
) -> Relationship:
    edge = await load_owned_relationship(session, relationship_id, caller_id)
    return await _enriched(session, edge)


async def get_entity_relationships(
    session: AsyncSession, entity_id: UUID, caller_id: UUID
) -> ListResult[EntityRelationship]:
    """Return the edges incident on an entity, seen from that entity."""

    entity = await load_owned_entity(session, entity_id, caller_id)
    result = await session.execute(
        select(RelationshipSQL)
        .where(
            RelationshipSQL.project_id == entity.project_id,
            or_(
                RelationshipSQL.source_id == entity_id,
                RelationshipSQL.target_id == entity_id,
            ),
        )
        .order_by(RelationshipSQL.created_at)
    )
    edges = list(result.scalars().all())

    others = {e.target_id if e.source_id == entity_id else e.source_id for e in edges}
    others.discard(entity_id)
    refs = await _entity_refs(session, others)
    # Self-loops point back at the entity itself.
    refs[entity_id] = _ref(entity)

    views = []
    for edge in edges:
        outgoing = edge.source_id == entity_id
        other_id = edge.target_id if outgoing else edge.source_id
        views.append(
            EntityRelationship(
                id=edge.id,
                type=edge.type,
                direction=Direction.OUTGOING if outgoing else Direction.INCOMING,
                description=edge.description,
                strength=edge.strength,
                entity=refs.get(other_id) or _placeholder(other_id),
            )
        )
    return ListResult.of(views)


async def update_relationship(
    session: AsyncSession,
    relationship_id: UUID,
    caller_id: UUID,
    patch: RelationshipUpdate,
) -> Relationship:
    """Patch type, description and strength.

    The new type is not checked against other edges here; a collision is
    refused by the storage constraint and reported as a duplicate.
    """

    sent = patch.model_fields_set
    async with write_transaction(session, "updating relationship"):
        edge = await load_owned_relationship(session, relationship_id, caller_id)
        if "type" in sent and patch.type is not None:
            edge.type = patch.type
        if "description" in sent:
            edge.description = patch.description
        if "strength" in sent and patch.strength is not None:
            edge.strength = patch.strength
        try:
            await session.flush()
        except IntegrityError as exc:
            raise BadRequestError(DUPLICATE_MESSAGE) from exc

    logger.info(
        "Updated relationship",
        extra={"relationship_id": str(relationship_id), "fields": sorted(sent)},
    )
    return await _enriched(session, edge)


async def delete_relationship(
    session: AsyncSession, relationship_id: UUID, caller_id: UUID
) -> None:
    """Delete one edge; a paired inverse edge is left alone."""

    async with write_transaction(session, "deleting relationship"):
        edge = await load_owned_relationship(session, relationship_id, caller_id)
        await session.delete(edge)

    logger.info("Deleted relationship", extra={"relationship_id": str(relationship_id)})


async def get_network(
    session: AsyncSession,
    project_id: UUID,
    caller_id: UUID,
    types: Iterable[str] | str | None = None,
) -> NetworkGraph:
    """Build the node/edge view of the project's graph for visualization.

    ``types`` restricts the entity set (a list or a comma-separated string);
    only edges whose two endpoints both survive that filter are emitted.
    """

    await check_project_ownership(session, project_id, caller_id)
    if isinstance(types, str):
        types = types.split(",")
    type_filter = sorted({t.strip().lower() for t in types or [] if t and t.strip()})

    entity_stmt = select(CodexEntitySQL).where(CodexEntitySQL.project_id == project_id)
    if type_filter:
        entity_stmt = entity_stmt.where(CodexEntitySQL.type.in_(type_filter))
    entities = list(
        (await session.execute(entity_stmt.order_by(CodexEntitySQL.name))).scalars().all()
    )
    entity_ids = [e.id for e in entities]

    edges: list[RelationshipSQL] = []
    if entity_ids:
        edge_result = await session.execute(
            select(RelationshipSQL)
            .where(
                RelationshipSQL.project_id == project_id,
                RelationshipSQL.source_id.in_(entity_ids),
                RelationshipSQL.target_id.in_(entity_ids),
            )
            .order_by(RelationshipSQL.created_at)
        )
        edges = list(edge_result.scalars().all())

    return NetworkGraph(
        nodes=[
            NetworkNode(id=e.id, label=e.name, group=e.type, title=e.name) for e in entities
        ],
        edges=[
            NetworkEdge(
                id=r.id,
                from_=r.source_id,
                to=r.target_id,
                label=r.type,
                title=r.description or r.type,
                value=r.strength or 1,
            )
            for r in edges
        ],
    )


__all__ = [
    "DUPLICATE_MESSAGE",
    "DUPLICATE_INVERSE_MESSAGE",
    "load_owned_relationship",
    "create_relationship",
    "list_relationships",
    "get_relationship",
    "get_entity_relationships",
    "update_relationship",
    "delete_relationship",
    "get_network",
]
