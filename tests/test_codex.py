"""Tests for canon/codex.py"""

import uuid

import pytest

from narratopia.canon import codex, relationships
from narratopia.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from narratopia.models import EntityType, EntityUpdate, RelationshipCreate


@pytest.mark.asyncio
class TestEntityCrud:
    async def test_create_and_get(self, session, owner_id, make_entity):
        created = await make_entity(
            "Ada", attributes={"age": 36}, tags=["hero"], images=["ada.png"]
        )
        fetched = await codex.get_entity(session, created.id, owner_id)
        assert fetched.type is EntityType.CHARACTER
        assert fetched.attributes == {"age": 36}
        assert fetched.tags == ["hero"]
        assert fetched.images == ["ada.png"]

    async def test_update_only_sent_fields(self, session, owner_id, make_entity):
        created = await make_entity("Ada", description="Engineer", tags=["hero"])
        updated = await codex.update_entity(
            session, created.id, owner_id, EntityUpdate(name="Ada Lovelace")
        )
        assert updated.name == "Ada Lovelace"
        assert updated.description == "Engineer"
        assert updated.tags == ["hero"]

    async def test_update_clears_description(self, session, owner_id, make_entity):
        created = await make_entity("Ada", description="Engineer")
        updated = await codex.update_entity(
            session, created.id, owner_id, EntityUpdate.model_validate({"description": None})
        )
        assert updated.description is None

    async def test_get_missing(self, session, owner_id):
        with pytest.raises(NotFoundError) as exc_info:
            await codex.get_entity(session, uuid.uuid4(), owner_id)
        assert exc_info.value.message == "Codex entity not found"

    async def test_get_not_owner(self, session, stranger_id, make_entity):
        created = await make_entity("Ada")
        with pytest.raises(ForbiddenError):
            await codex.get_entity(session, created.id, stranger_id)


@pytest.mark.asyncio
class TestListAndSearch:
    async def test_list_sorted_by_name_with_filters(self, session, project_id, owner_id, make_entity):
        await make_entity("Zed")
        await make_entity("Harbor", type="location", tags=["coast"])
        await make_entity("Ada", description="Sails the coast", tags=["hero"])

        everything = await codex.list_entities(session, project_id, owner_id)
        assert [e.name for e in everything.data] == ["Ada", "Harbor", "Zed"]

        characters = await codex.list_entities(
            session, project_id, owner_id, type=EntityType.CHARACTER
        )
        assert [e.name for e in characters.data] == ["Ada", "Zed"]

        by_text = await codex.list_entities(session, project_id, owner_id, search="COAST")
        assert [e.name for e in by_text.data] == ["Ada"]

        by_tag = await codex.list_entities(session, project_id, owner_id, tags=["coast"])
        assert [e.name for e in by_tag.data] == ["Harbor"]

    async def test_search_matches_name_description_and_tags(
        self, session, project_id, owner_id, make_entity
    ):
        await make_entity("Ada", description="A sailor")
        await make_entity("Port Sail", type="location")
        await make_entity("Compass", type="item", tags=["sailing"])
        await make_entity("Bob")

        hits = await codex.search_entities(session, project_id, owner_id, "sail")
        assert hits.count == 3
        assert {h.name for h in hits.data} == {"Ada", "Port Sail", "Compass"}

    async def test_search_restricted_by_types(self, session, project_id, owner_id, make_entity):
        await make_entity("Ada Sail")
        await make_entity("Port Sail", type="location")
        hits = await codex.search_entities(
            session, project_id, owner_id, "sail", "location,unknown"
        )
        assert [h.name for h in hits.data] == ["Port Sail"]

    async def test_search_capped(self, session, project_id, owner_id, make_entity):
        for i in range(codex.SEARCH_LIMIT + 5):
            await make_entity(f"Extra {i:02d}")
        hits = await codex.search_entities(session, project_id, owner_id, "extra")
        assert hits.count == codex.SEARCH_LIMIT

    async def test_wildcards_are_literal(self, session, project_id, owner_id, make_entity):
        await make_entity("100% Loyal")
        await make_entity("Plain_Name")
        await make_entity("Bob")
        percent = await codex.search_entities(session, project_id, owner_id, "%")
        assert [h.name for h in percent.data] == ["100% Loyal"]
        underscore = await codex.list_entities(session, project_id, owner_id, search="_")
        assert [e.name for e in underscore.data] == ["Plain_Name"]

    async def test_tag_filter_matches_whole_tags(
        self, session, project_id, owner_id, make_entity
    ):
        await make_entity("Key", type="item", tags=["brass"])
        await make_entity("Bell", type="item", tags=["old brass"])
        await make_entity("Rope", type="item", tags=["hemp"])
        by_tag = await codex.list_entities(session, project_id, owner_id, tags=["brass", "hemp"])
        assert [e.name for e in by_tag.data] == ["Key", "Rope"]

    async def test_search_non_ascii_tag(self, session, project_id, owner_id, make_entity):
        await make_entity("Cafe", type="location", tags=["caf\u00e9 society"])
        hits = await codex.search_entities(session, project_id, owner_id, "caf\u00e9")
        assert [h.name for h in hits.data] == ["Cafe"]

    async def test_blank_query_rejected(self, session, project_id, owner_id):
        with pytest.raises(BadRequestError):
            await codex.search_entities(session, project_id, owner_id, "   ")

    async def test_other_project_entities_not_listed(
        self, session, project_id, other_project_id, owner_id, make_entity
    ):
        await make_entity("Elsewhere", project=other_project_id)
        listing = await codex.list_entities(session, project_id, owner_id)
        assert listing.count == 0


@pytest.mark.asyncio
class TestResolveEntity:
    async def test_cross_project_is_bad_request(
        self, session, project_id, other_project_id, make_entity
    ):
        foreign = await make_entity("Elsewhere", project=other_project_id)
        with pytest.raises(BadRequestError) as exc_info:
            await codex.resolve_entity(session, foreign.id, project_id, "Source entity")
        assert exc_info.value.message == "Source entity: Entity does not belong to this project"

    async def test_missing_is_not_found(self, session, project_id):
        with pytest.raises(NotFoundError) as exc_info:
            await codex.resolve_entity(session, uuid.uuid4(), project_id, "Target entity")
        assert exc_info.value.message == "Target entity: Entity not found"


@pytest.mark.asyncio
class TestDeleteEntity:
    async def test_cascades_to_incident_relationships(
        self, session, project_id, owner_id, make_entity
    ):
        ada = await make_entity("Ada")
        bob = await make_entity("Bob")
        cy = await make_entity("Cy")
        for source, target in ((ada, bob), (bob, ada), (bob, cy)):
            await relationships.create_relationship(
                session,
                project_id,
                owner_id,
                RelationshipCreate(source_id=source.id, target_id=target.id, type="knows"),
            )

        await codex.delete_entity(session, ada.id, owner_id)

        remaining = await relationships.list_relationships(session, project_id, owner_id)
        assert [(r.source.name, r.target.name) for r in remaining.data] == [("Bob", "Cy")]
        incident = await relationships.get_entity_relationships(session, bob.id, owner_id)
        assert all(r.entity.id != ada.id for r in incident.data)
        with pytest.raises(NotFoundError):
            await codex.get_entity(session, ada.id, owner_id)

    async def test_delete_missing(self, session, owner_id):
        with pytest.raises(NotFoundError):
            await codex.delete_entity(session, uuid.uuid4(), owner_id)
