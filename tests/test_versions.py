"""Tests for canon/versions.py"""

import re
import uuid

import pytest

from narratopia.canon import chapters, versions
from narratopia.core.exceptions import ForbiddenError, NotFoundError
from narratopia.models import ChapterCreate, ChapterUpdate
from narratopia.models.version import AUTO_SAVE_DESCRIPTION


@pytest.fixture
def make_chapter(session, project_id, owner_id):
    async def _make(content="first draft words"):
        return await chapters.create_chapter(
            session, project_id, owner_id, ChapterCreate(title="Chapter", content=content)
        )

    return _make


async def _edit(session, chapter_id, owner_id, content):
    return await chapters.update_chapter(
        session, chapter_id, owner_id, ChapterUpdate(content=content)
    )


@pytest.mark.asyncio
class TestSnapshot:
    async def test_copies_content_and_word_count(self, session, owner_id, make_chapter):
        chapter = await make_chapter("one two three")
        version = await versions.create_version(session, chapter.id, owner_id, "Draft 1")
        assert version.chapter_id == chapter.id
        assert version.project_id == chapter.project_id
        assert version.word_count == 3
        assert version.description == "Draft 1"
        assert version.content.model_dump(mode="json") == "one two three"

    async def test_default_description_has_date(self, session, owner_id, make_chapter):
        chapter = await make_chapter()
        version = await versions.create_version(session, chapter.id, owner_id)
        assert re.fullmatch(r"Snapshot created on \d{4}-\d{2}-\d{2}", version.description)

    async def test_snapshot_of_empty_chapter(self, session, owner_id, make_chapter):
        chapter = await make_chapter(content=None)
        version = await versions.create_version(session, chapter.id, owner_id)
        assert version.content is None
        assert version.word_count == 0

    async def test_later_edits_do_not_touch_snapshot(self, session, owner_id, make_chapter):
        raw = {"blocks": [{"text": "original block"}]}
        chapter = await make_chapter(raw)
        version = await versions.create_version(session, chapter.id, owner_id)
        await _edit(session, chapter.id, owner_id, {"blocks": [{"text": "rewritten"}]})
        stored = await versions.get_version(session, version.id, owner_id)
        assert stored.content.model_dump(mode="json")["blocks"][0]["text"] == "original block"

    async def test_missing_chapter(self, session, owner_id):
        with pytest.raises(NotFoundError):
            await versions.create_version(session, uuid.uuid4(), owner_id)

    async def test_not_owner(self, session, owner_id, stranger_id, make_chapter):
        chapter = await make_chapter()
        with pytest.raises(ForbiddenError):
            await versions.create_version(session, chapter.id, stranger_id)


@pytest.mark.asyncio
class TestListVersions:
    async def test_newest_first(self, session, owner_id, make_chapter):
        chapter = await make_chapter()
        for label in ("v1", "v2", "v3"):
            await versions.create_version(session, chapter.id, owner_id, label)
        listing = await versions.list_versions(session, chapter.id, owner_id)
        assert listing.count == 3
        assert [v.description for v in listing.data] == ["v3", "v2", "v1"]
        assert not hasattr(listing.data[0], "content")

    async def test_missing_version(self, session, owner_id):
        with pytest.raises(NotFoundError) as exc_info:
            await versions.get_version(session, uuid.uuid4(), owner_id)
        assert exc_info.value.message == "Version not found"


@pytest.mark.asyncio
class TestRestoreVersion:
    async def test_restore_properties(self, session, owner_id, make_chapter):
        chapter = await make_chapter("the old text")
        target = await versions.create_version(session, chapter.id, owner_id, "keep")
        await _edit(session, chapter.id, owner_id, "brand new text with more words")

        result = await versions.restore_version(session, target.id, owner_id)

        # The chapter carries the target's content and count.
        assert result.chapter.content.model_dump(mode="json") == "the old text"
        assert result.chapter.word_count == 3
        # One safety snapshot of the pre-restore state.
        safety = await versions.get_version(session, result.auto_saved_version.id, owner_id)
        assert safety.description == AUTO_SAVE_DESCRIPTION
        assert safety.content.model_dump(mode="json") == "brand new text with more words"
        assert safety.word_count == 6
        # The target is unchanged.
        again = await versions.get_version(session, target.id, owner_id)
        assert again.description == "keep"
        assert again.content.model_dump(mode="json") == "the old text"

        listing = await versions.list_versions(session, chapter.id, owner_id)
        assert listing.count == 2

    async def test_each_restore_adds_one_snapshot(self, session, owner_id, make_chapter):
        chapter = await make_chapter("a")
        target = await versions.create_version(session, chapter.id, owner_id)
        await versions.restore_version(session, target.id, owner_id)
        await versions.restore_version(session, target.id, owner_id)
        listing = await versions.list_versions(session, chapter.id, owner_id)
        assert listing.count == 3
        assert sum(v.description == AUTO_SAVE_DESCRIPTION for v in listing.data) == 2

    async def test_restore_is_undoable(self, session, owner_id, make_chapter):
        chapter = await make_chapter("before")
        target = await versions.create_version(session, chapter.id, owner_id)
        await _edit(session, chapter.id, owner_id, "after edits")
        result = await versions.restore_version(session, target.id, owner_id)
        undone = await versions.restore_version(session, result.auto_saved_version.id, owner_id)
        assert undone.chapter.content.model_dump(mode="json") == "after edits"

    async def test_restore_not_owner(self, session, owner_id, stranger_id, make_chapter):
        chapter = await make_chapter()
        target = await versions.create_version(session, chapter.id, owner_id)
        with pytest.raises(ForbiddenError):
            await versions.restore_version(session, target.id, stranger_id)
