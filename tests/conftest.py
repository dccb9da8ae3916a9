# tests/conftest.py
"""Shared fixtures: an in-memory SQLite store and an owned project."""

from __future__ import annotations

import uuid

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from narratopia.canon import codex
from narratopia.models import Base, EntityCreate, ProjectSQL


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def stranger_id() -> uuid.UUID:
    return uuid.uuid4()


async def _make_project(session: AsyncSession, user_id: uuid.UUID, title: str) -> uuid.UUID:
    project = ProjectSQL(user_id=user_id, title=title)
    session.add(project)
    await session.commit()
    return project.id


@pytest_asyncio.fixture
async def project_id(session, owner_id) -> uuid.UUID:
    return await _make_project(session, owner_id, "The Long Road")


@pytest_asyncio.fixture
async def other_project_id(session, owner_id) -> uuid.UUID:
    """A second project of the same owner."""
    return await _make_project(session, owner_id, "Side Quest")


@pytest.fixture
def make_entity(session, project_id, owner_id):
    """Factory creating codex entities in ``project_id`` by default."""

    async def _make(name: str, type: str = "character", project: uuid.UUID | None = None, **fields):
        payload = EntityCreate(type=type, name=name, **fields)
        return await codex.create_entity(session, project or project_id, owner_id, payload)

    return _make
