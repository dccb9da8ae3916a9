# src/narratopia/web/deps.py
"""Request-scoped dependencies for the HTTP layer."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from narratopia.canon import get_pg
from narratopia.core.exceptions import UnauthorizedError


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield one session per request."""
    async with get_pg() as session:
        yield session


async def get_caller_id(x_user_id: Annotated[str | None, Header()] = None) -> UUID:
    """Identify the caller from the ``X-User-Id`` header set by the auth gateway."""

    if not x_user_id:
        raise UnauthorizedError("Not authorized, no user")
    try:
        return UUID(x_user_id)
    except ValueError:
        raise UnauthorizedError("Not authorized, invalid user") from None


SessionDep = Annotated[AsyncSession, Depends(get_session)]
CallerDep = Annotated[UUID, Depends(get_caller_id)]

__all__ = ["get_session", "get_caller_id", "SessionDep", "CallerDep"]
