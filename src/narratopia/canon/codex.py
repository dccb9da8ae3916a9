# src/narratopia/canon/codex.py
"""Codex entity storage, search and the relationship cascade on delete."""

from __future__ import annotations

import json
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import ColumnElement, String, cast, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from narratopia.canon.db import write_transaction
from narratopia.canon.projects import check_project_ownership
from narratopia.core.exceptions import BadRequestError, NotFoundError
from narratopia.core.logging import get_logger
from narratopia.models import (
    CodexEntity,
    CodexEntitySQL,
    EntityCreate,
    EntitySearchHit,
    EntityType,
    EntityUpdate,
    ListResult,
    RelationshipSQL,
)

logger = get_logger(__name__)

SEARCH_LIMIT = 20


def _contains(column: ColumnElement, needle: str) -> ColumnElement[bool]:
    return column.icontains(needle, autoescape=True)


def _tags_text() -> ColumnElement:
    # Tags are a JSON list; match against its serialized text.
    return cast(CodexEntitySQL.tags, String)


async def _project_entities(
    session: AsyncSession,
    project_id: UUID,
    types: Iterable[EntityType] = (),
    *criteria: ColumnElement[bool],
    limit: int | None = None,
) -> list[CodexEntitySQL]:
    stmt = select(CodexEntitySQL).where(CodexEntitySQL.project_id == project_id, *criteria)
    type_values = [t.value for t in types]
    if type_values:
        stmt = stmt.where(CodexEntitySQL.type.in_(type_values))
    stmt = stmt.order_by(CodexEntitySQL.name)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def resolve_entity(
    session: AsyncSession, entity_id: UUID, project_id: UUID, label: str = "Entity"
) -> CodexEntitySQL:
    """Return ``entity_id`` if it exists inside ``project_id``.

    A missing entity is :class:`NotFoundError`; an entity of another project
    is :class:`BadRequestError`. ``label`` prefixes the message so callers
    can tell which endpoint failed.
    """

    entity = await session.get(CodexEntitySQL, entity_id)
    if entity is None:
        raise NotFoundError(
            f"{label}: Entity not found", details={"entity_id": str(entity_id)}
        )
    if entity.project_id != project_id:
        raise BadRequestError(
            f"{label}: Entity does not belong to this project",
            details={"entity_id": str(entity_id), "project_id": str(project_id)},
        )
    return entity


async def load_owned_entity(
    session: AsyncSession, entity_id: UUID, caller_id: UUID
) -> CodexEntitySQL:
    entity = await session.get(CodexEntitySQL, entity_id)
    if entity is None:
        raise NotFoundError("Codex entity not found", details={"entity_id": str(entity_id)})
    await check_project_ownership(session, entity.project_id, caller_id)
    return entity


async def list_entities(
    session: AsyncSession,
    project_id: UUID,
    caller_id: UUID,
    *,
    type: EntityType | None = None,
    search: str | None = None,
    tags: Iterable[str] | None = None,
) -> ListResult[CodexEntity]:
    """Return the project's entities sorted by name, optionally filtered."""

    await check_project_ownership(session, project_id, caller_id)
    criteria: list[ColumnElement[bool]] = []
    needle = (search or "").strip()
    if needle:
        criteria.append(
            or_(
                _contains(CodexEntitySQL.name, needle),
                _contains(CodexEntitySQL.description, needle),
            )
        )
    wanted_tags = sorted({t.strip() for t in tags or [] if t and t.strip()})
    if wanted_tags:
        # A serialized JSON string literal only matches a whole list element.
        criteria.append(
            or_(
                *[
                    _tags_text().contains(json.dumps(tag), autoescape=True)
                    for tag in wanted_tags
                ]
            )
        )
    entities = await _project_entities(
        session, project_id, [type] if type else [], *criteria
    )
    return ListResult.of([CodexEntity.model_validate(e) for e in entities])


async def search_entities(
    session: AsyncSession,
    project_id: UUID,
    caller_id: UUID,
    query: str,
    types: Iterable[str] | str | None = None,
) -> ListResult[EntitySearchHit]:
    """Case-insensitive substring search over name, description and tags."""

    needle = (query or "").strip()
    if not needle:
        raise BadRequestError("Search query is required")
    await check_project_ownership(session, project_id, caller_id)
    parsed_types = EntityType.parse_many(types)
    entities = await _project_entities(
        session,
        project_id,
        parsed_types,
        or_(
            _contains(CodexEntitySQL.name, needle),
            _contains(CodexEntitySQL.description, needle),
            # Compare in the escaped form the JSON column stores.
            _contains(_tags_text(), json.dumps(needle)[1:-1]),
        ),
        limit=SEARCH_LIMIT,
    )
    return ListResult.of([EntitySearchHit.model_validate(e) for e in entities])


async def create_entity(
    session: AsyncSession, project_id: UUID, caller_id: UUID, payload: EntityCreate
) -> CodexEntity:
    async with write_transaction(session, "creating codex entity"):
        await check_project_ownership(session, project_id, caller_id)
        entity = CodexEntitySQL(
            project_id=project_id,
            type=payload.type.value,
            name=payload.name,
            description=payload.description,
            attributes=payload.attributes,
            images=payload.images,
            tags=payload.tags,
        )
        session.add(entity)
        await session.flush()

    logger.info(
        "Created codex entity",
        extra={
            "project_id": str(project_id),
            "entity_id": str(entity.id),
            "entity_type": entity.type,
        },
    )
    return CodexEntity.model_validate(entity)


async def get_entity(session: AsyncSession, entity_id: UUID, caller_id: UUID) -> CodexEntity:
    return CodexEntity.model_validate(await load_owned_entity(session, entity_id, caller_id))


async def update_entity(
    session: AsyncSession, entity_id: UUID, caller_id: UUID, patch: EntityUpdate
) -> CodexEntity:
    sent = patch.model_fields_set
    async with write_transaction(session, "updating codex entity"):
        entity = await load_owned_entity(session, entity_id, caller_id)
        if "name" in sent and patch.name is not None:
            entity.name = patch.name
        if "description" in sent:
            entity.description = patch.description
        if "attributes" in sent:
            entity.attributes = patch.attributes or {}
        if "images" in sent:
            entity.images = patch.images or []
        if "tags" in sent:
            entity.tags = patch.tags or []
        await session.flush()

    logger.info(
        "Updated codex entity",
        extra={"entity_id": str(entity_id), "fields": sorted(sent)},
    )
    return CodexEntity.model_validate(entity)


async def delete_entity(session: AsyncSession, entity_id: UUID, caller_id: UUID) -> None:
    """Delete an entity together with every relationship touching it."""

    async with write_transaction(session, "deleting codex entity"):
        await load_owned_entity(session, entity_id, caller_id)
        edges = await session.execute(
            delete(RelationshipSQL).where(
                or_(
                    RelationshipSQL.source_id == entity_id,
                    RelationshipSQL.target_id == entity_id,
                )
            )
        )
        await session.execute(delete(CodexEntitySQL).where(CodexEntitySQL.id == entity_id))

    logger.info(
        "Deleted codex entity",
        extra={"entity_id": str(entity_id), "relationships_deleted": edges.rowcount},
    )


__all__ = [
    "SEARCH_LIMIT",
    "resolve_entity",
    "load_owned_entity",
    "list_entities",
    "search_entities",
    "create_entity",
    "get_entity",
    "update_entity",
    "delete_entity",
]
