"""Tests for canon/relationships.py"""

import uuid

import pytest
import pytest_asyncio

from narratopia.canon import relationships
from narratopia.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from narratopia.models import Direction, RelationshipCreate, RelationshipSQL, RelationshipUpdate
from narratopia.models.relationship import UNKNOWN_ENTITY_NAME


@pytest.fixture
def link(session, project_id, owner_id):
    async def _link(source, target, type="ally", **fields):
        payload = RelationshipCreate(
            source_id=source.id, target_id=target.id, type=type, **fields
        )
        return await relationships.create_relationship(session, project_id, owner_id, payload)

    return _link


@pytest_asyncio.fixture
async def cast(make_entity):
    ada = await make_entity("Ada")
    bob = await make_entity("Bob")
    harbor = await make_entity("Harbor", type="location")
    return ada, bob, harbor


@pytest.mark.asyncio
class TestCreateRelationship:
    async def test_single_edge_is_enriched(self, cast, link):
        ada, bob, _ = cast
        pair = await link(ada, bob, "mentor", description="Teaches Bob", strength=8)
        edge = pair.relationship
        assert pair.inverse_relationship is None
        assert (edge.source.name, edge.target.name) == ("Ada", "Bob")
        assert edge.source.type == "character"
        assert edge.strength == 8
        assert edge.description == "Teaches Bob"

    async def test_default_strength(self, cast, link):
        ada, bob, _ = cast
        pair = await link(ada, bob)
        assert pair.relationship.strength == 5

    async def test_inverse_uses_same_type_by_default(self, session, project_id, owner_id, cast, link):
        ada, bob, _ = cast
        pair = await link(ada, bob, "parentOf", create_inverse=True)
        inverse = pair.inverse_relationship
        assert inverse is not None
        assert (inverse.source_id, inverse.target_id) == (bob.id, ada.id)
        assert inverse.type == "parentOf"
        assert inverse.id != pair.relationship.id

        listing = await relationships.list_relationships(session, project_id, owner_id)
        assert listing.count == 2

    async def test_inverse_with_own_type(self, cast, link):
        ada, bob, _ = cast
        pair = await link(ada, bob, "parentOf", create_inverse=True, inverse_type="childOf")
        assert pair.inverse_relationship.type == "childOf"

    async def test_duplicate_triple_rejected(self, session, project_id, owner_id, cast, link):
        ada, bob, _ = cast
        await link(ada, bob, "ally")
        with pytest.raises(BadRequestError) as exc_info:
            await link(ada, bob, "ally")
        assert exc_info.value.message == relationships.DUPLICATE_MESSAGE
        listing = await relationships.list_relationships(session, project_id, owner_id)
        assert listing.count == 1

    async def test_same_pair_different_type_allowed(self, cast, link):
        ada, bob, _ = cast
        await link(ada, bob, "ally")
        pair = await link(ada, bob, "rival")
        assert pair.relationship.type == "rival"

    async def test_duplicate_inverse_rejects_whole_create(
        self, session, project_id, owner_id, cast, link
    ):
        ada, bob, _ = cast
        await link(bob, ada, "ally")
        with pytest.raises(BadRequestError) as exc_info:
            await link(ada, bob, "ally", create_inverse=True)
        assert exc_info.value.message == relationships.DUPLICATE_INVERSE_MESSAGE
        listing = await relationships.list_relationships(session, project_id, owner_id)
        assert listing.count == 1

    async def test_self_loop_with_inverse_is_duplicate(self, cast, link):
        ada, _, _ = cast
        with pytest.raises(BadRequestError):
            await link(ada, ada, "self", create_inverse=True)

    async def test_cross_project_endpoint(self, make_entity, other_project_id, cast, link):
        ada, _, _ = cast
        stranger = await make_entity("Elsewhere", project=other_project_id)
        with pytest.raises(BadRequestError) as exc_info:
            await link(ada, stranger)
        assert exc_info.value.message.startswith("Target entity:")

    async def test_missing_endpoint(self, session, project_id, owner_id, cast):
        ada, _, _ = cast
        payload = RelationshipCreate(source_id=uuid.uuid4(), target_id=ada.id, type="ally")
        with pytest.raises(NotFoundError) as exc_info:
            await relationships.create_relationship(session, project_id, owner_id, payload)
        assert exc_info.value.message == "Source entity: Entity not found"

    async def test_not_owner(self, session, project_id, stranger_id, cast):
        ada, bob, _ = cast
        payload = RelationshipCreate(source_id=ada.id, target_id=bob.id, type="ally")
        with pytest.raises(ForbiddenError):
            await relationships.create_relationship(session, project_id, stranger_id, payload)


@pytest.mark.asyncio
class TestEntityRelationships:
    async def test_directions_from_entity_view(self, session, owner_id, cast, link):
        ada, bob, harbor = cast
        await link(ada, bob, "mentor")
        await link(harbor, ada, "home of")
        views = await relationships.get_entity_relationships(session, ada.id, owner_id)
        seen = {(v.type, v.direction, v.entity.name) for v in views.data}
        assert seen == {
            ("mentor", Direction.OUTGOING, "Bob"),
            ("home of", Direction.INCOMING, "Harbor"),
        }

    async def test_self_loop_points_at_itself(self, session, owner_id, cast, link):
        ada, _, _ = cast
        await link(ada, ada, "doubts")
        views = await relationships.get_entity_relationships(session, ada.id, owner_id)
        assert views.count == 1
        assert views.data[0].direction is Direction.OUTGOING
        assert views.data[0].entity.id == ada.id

    async def test_unrelated_entity_is_empty(self, session, owner_id, cast, link):
        ada, bob, harbor = cast
        await link(ada, bob)
        views = await relationships.get_entity_relationships(session, harbor.id, owner_id)
        assert views.count == 0


@pytest.mark.asyncio
class TestDanglingEndpoints:
    async def test_placeholder_for_unresolved_entity(
        self, session, project_id, owner_id, cast
    ):
        ada, _, _ = cast
        # Storage without enforced foreign keys can leave an edge behind.
        session.add(
            RelationshipSQL(
                project_id=project_id,
                source_id=ada.id,
                target_id=uuid.uuid4(),
                type="haunted by",
                strength=5,
            )
        )
        await session.commit()
        listing = await relationships.list_relationships(session, project_id, owner_id)
        assert listing.data[0].target.name == UNKNOWN_ENTITY_NAME
        assert listing.data[0].target.type == "unknown"


@pytest.mark.asyncio
class TestUpdateAndDelete:
    async def test_patch_fields(self, session, owner_id, cast, link):
        ada, bob, _ = cast
        pair = await link(ada, bob, "ally", description="old")
        updated = await relationships.update_relationship(
            session,
            pair.relationship.id,
            owner_id,
            RelationshipUpdate(type="rival", strength=9),
        )
        assert updated.type == "rival"
        assert updated.strength == 9
        assert updated.description == "old"
        assert updated.source.name == "Ada"

    async def test_patch_into_existing_triple(self, session, owner_id, cast, link):
        ada, bob, _ = cast
        await link(ada, bob, "ally")
        other = await link(ada, bob, "rival")
        with pytest.raises(BadRequestError):
            await relationships.update_relationship(
                session, other.relationship.id, owner_id, RelationshipUpdate(type="ally")
            )
        unchanged = await relationships.get_relationship(session, other.relationship.id, owner_id)
        assert unchanged.type == "rival"

    async def test_delete_leaves_inverse(self, session, project_id, owner_id, cast, link):
        ada, bob, _ = cast
        pair = await link(ada, bob, "sibling", create_inverse=True)
        await relationships.delete_relationship(session, pair.relationship.id, owner_id)
        listing = await relationships.list_relationships(session, project_id, owner_id)
        assert [r.id for r in listing.data] == [pair.inverse_relationship.id]
        with pytest.raises(NotFoundError):
            await relationships.get_relationship(session, pair.relationship.id, owner_id)

    async def test_update_does_not_touch_inverse(self, session, owner_id, cast, link):
        ada, bob, _ = cast
        pair = await link(ada, bob, "sibling", create_inverse=True)
        await relationships.update_relationship(
            session, pair.relationship.id, owner_id, RelationshipUpdate(strength=1)
        )
        inverse = await relationships.get_relationship(
            session, pair.inverse_relationship.id, owner_id
        )
        assert inverse.strength == 5


@pytest.mark.asyncio
class TestNetwork:
    async def test_full_graph(self, session, project_id, owner_id, cast, link):
        ada, bob, harbor = cast
        await link(ada, bob, "ally", strength=7)
        await link(ada, harbor, "lives in")
        graph = await relationships.get_network(session, project_id, owner_id)
        assert {n.label for n in graph.nodes} == {"Ada", "Bob", "Harbor"}
        assert {n.group for n in graph.nodes} == {"character", "location"}
        ally = next(e for e in graph.edges if e.label == "ally")
        assert (ally.from_, ally.to, ally.value) == (ada.id, bob.id, 7)
        assert ally.title == "ally"

    async def test_type_filter_drops_edges_leaving_the_set(
        self, session, project_id, owner_id, cast, link
    ):
        ada, bob, harbor = cast
        await link(ada, bob, "ally")
        await link(ada, harbor, "lives in")
        await link(harbor, bob, "shelters")
        graph = await relationships.get_network(session, project_id, owner_id, ["character"])
        assert {n.label for n in graph.nodes} == {"Ada", "Bob"}
        assert [e.label for e in graph.edges] == ["ally"]

    async def test_comma_separated_filter(self, session, project_id, owner_id, cast, link):
        ada, _, harbor = cast
        await link(ada, harbor, "lives in", description="Since childhood")
        graph = await relationships.get_network(
            session, project_id, owner_id, "Character, location"
        )
        assert len(graph.nodes) == 3
        assert graph.edges[0].title == "Since childhood"

    async def test_unknown_type_matches_nothing(self, session, project_id, owner_id, cast, link):
        ada, bob, _ = cast
        await link(ada, bob)
        graph = await relationships.get_network(session, project_id, owner_id, ["dragon"])
        assert graph.nodes == []
        assert graph.edges == []
