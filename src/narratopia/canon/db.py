# src/narratopia/canon/db.py
"""Database session creation, locking, transactions and migrations."""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from uuid import UUID

from alembic import command as alembic_command  # type: ignore[attr-defined]
from alembic.config import Config
from sqlalchemy import BigInteger, bindparam
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.sql import func, select

from narratopia.config import config
from narratopia.core.exceptions import InternalError, NarratopiaError, create_error_context
from narratopia.core.logging import get_logger

logger = get_logger(__name__)

_ENGINE: AsyncEngine | None = None
_SESSION_FACTORY: async_sessionmaker[AsyncSession] | None = None

# Stable advisory lock id for schema setup. Truncated to 63 bits so it fits BIGINT.
_RAW_SCHEMA_LOCK_ID = 0x4E61727261746F7069615F534348454D41
SCHEMA_LOCK_ID = int(_RAW_SCHEMA_LOCK_ID & 0x7FFF_FFFF_FFFF_FFFF)


def get_engine() -> AsyncEngine:
    """Return the process-wide async engine, creating it on first use."""

    global _ENGINE, _SESSION_FACTORY
    if _ENGINE is None:
        _ENGINE = create_async_engine(config.database.url, echo=config.database.echo)
        _SESSION_FACTORY = async_sessionmaker(
            bind=_ENGINE, class_=AsyncSession, expire_on_commit=False
        )
    return _ENGINE


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    get_engine()
    assert _SESSION_FACTORY is not None
    return _SESSION_FACTORY


@asynccontextmanager
async def get_pg() -> AsyncIterator[AsyncSession]:
    """Return a SQLAlchemy asynchronous session."""

    start_time = time.time()
    try:
        async with get_session_factory()() as session:
            yield session
    except SQLAlchemyError as exc:  # pragma: no cover - connection errors
        logger.error(
            "PostgreSQL session error: %s",
            exc,
            extra={"operation": "session", "duration": time.time() - start_time},
        )
        raise
    logger.debug(
        "PostgreSQL session completed",
        extra={"operation": "session", "duration": time.time() - start_time},
    )


def project_lock_key(project_id: UUID) -> int:
    """Map ``project_id`` onto a signed 64-bit advisory lock key."""

    return int(project_id.int & 0x7FFF_FFFF_FFFF_FFFF)


async def lock_project(session: AsyncSession, project_id: UUID) -> None:
    """Serialize chapter index mutations for ``project_id``.

    Takes a transaction-scoped PostgreSQL advisory lock that is released on
    commit or rollback. Other dialects serialize writers on their own, so
    the call is a no-op there.
    """

    if session.get_bind().dialect.name != "postgresql":
        return
    # Use typed bindparam (BIGINT) to satisfy pg_advisory_xact_lock signature with psycopg3
    stmt_lock = select(
        func.pg_advisory_xact_lock(bindparam("id", type_=BigInteger))
    ).params(id=project_lock_key(project_id))
    await session.execute(stmt_lock)
    logger.debug("Acquired project lock", extra={"project_id": str(project_id)})


@asynccontextmanager
async def write_transaction(session: AsyncSession, operation: str) -> AsyncIterator[None]:
    """Commit everything done inside the block once, or nothing at all.

    Domain errors are re-raised untouched after the rollback; storage errors
    are logged and surfaced as :class:`InternalError`.
    """

    start_time = time.time()
    try:
        yield
        await session.commit()
    except NarratopiaError:
        await session.rollback()
        raise
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception(
            "Storage failure during %s",
            operation,
            extra={"operation": operation, "duration": time.time() - start_time},
        )
        raise InternalError(
            f"Server error while {operation}",
            details=create_error_context(operation=operation, error=str(exc)),
        ) from exc
    except Exception:
        await session.rollback()
        raise
    logger.debug(
        "Committed %s",
        operation,
        extra={"operation": operation, "duration": time.time() - start_time},
    )


def _alembic_config() -> Config:
    root = Path(__file__).resolve().parents[3]
    cfg = Config(str(root / "alembic.ini"))
    cfg.set_main_option("script_location", str(root / "migrations"))
    return cfg


async def ensure_schema() -> None:
    """Apply migrations once, serialized across processes by an advisory lock."""

    start_time = time.time()
    logger.info("Starting database schema initialization", extra={"lock_id": SCHEMA_LOCK_ID})
    async with get_pg() as session:
        stmt_lock = select(
            func.pg_advisory_lock(bindparam("id", type_=BigInteger))
        ).params(id=SCHEMA_LOCK_ID)
        await session.execute(stmt_lock)
        try:
            # Alembic's env.py drives its own event loop, so run it off this one.
            await asyncio.to_thread(alembic_command.upgrade, _alembic_config(), "heads")
        finally:
            stmt_unlock = select(
                func.pg_advisory_unlock(bindparam("id", type_=BigInteger))
            ).params(id=SCHEMA_LOCK_ID)
            await session.execute(stmt_unlock)
            await session.commit()
    logger.info(
        "Schema initialization completed in %.2fs",
        time.time() - start_time,
        extra={"operation": "schema_ensure"},
    )


__all__ = [
    "get_engine",
    "get_session_factory",
    "get_pg",
    "lock_project",
    "project_lock_key",
    "write_transaction",
    "ensure_schema",
]
