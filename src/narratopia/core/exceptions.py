# src/narratopia/core/exceptions.py
"""Typed failures raised by canon operations.

Every failure carries a stable ``kind`` and an HTTP-style ``status_code`` so
the web layer can render it without inspecting messages. ``details`` holds
diagnostic context (for example the storage driver message) that is only
shown to callers outside production.
"""

from typing import Any


class NarratopiaError(Exception):
    """Base exception for all Narratopia domain errors."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class NotFoundError(NarratopiaError):
    """A referenced project, chapter, version, entity or relationship is missing."""

    kind = "not_found"
    status_code = 404


class UnauthorizedError(NarratopiaError):
    """The request carries no usable caller identity."""

    kind = "unauthorized"
    status_code = 401


class ForbiddenError(NarratopiaError):
    """The resolved project exists but is not owned by the caller."""

    kind = "forbidden"
    status_code = 403


class BadRequestError(NarratopiaError):
    """Malformed input, cross-project references or duplicate relationships."""

    kind = "bad_request"
    status_code = 400


class InternalError(NarratopiaError):
    """Storage failure or unexpected state."""

    kind = "internal"
    status_code = 500


def create_error_context(**kwargs: Any) -> dict[str, Any]:
    """Build a context dictionary for structured errors.

    Only keys whose values are not ``None`` are kept.
    """
    return {k: v for k, v in kwargs.items() if v is not None}


__all__ = [
    "NarratopiaError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "BadRequestError",
    "InternalError",
    "create_error_context",
]
