# src/narratopia/models/responses.py
"""Result envelopes shared by canon listings and the HTTP layer."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ListResult(BaseModel, Generic[T]):
    """A count plus the ordered records it counts."""

    count: int = Field(default=0, ge=0)
    data: list[T] = Field(default_factory=list)

    @classmethod
    def of(cls, items: Sequence[T]) -> ListResult[T]:
        return cls(count=len(items), data=list(items))


class DataResponse(BaseModel, Generic[T]):
    """``{"success": true, "data": ...}`` envelope."""

    success: bool = True
    message: str | None = None
    data: T


class ListResponse(BaseModel, Generic[T]):
    """``{"success": true, "count": n, "data": [...]}`` envelope."""

    success: bool = True
    count: int = 0
    data: list[T] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ListResult[T]) -> ListResponse[T]:
        return cls(count=result.count, data=result.data)


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    kind: str
    message: str
    details: dict | None = None


__all__ = [
    "ListResult",
    "DataResponse",
    "ListResponse",
    "MessageResponse",
    "ErrorResponse",
]
