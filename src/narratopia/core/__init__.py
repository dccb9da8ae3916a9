"""Core utilities for Narratopia."""

from .env import get_settings, load_env
from .exceptions import (
    BadRequestError,
    ForbiddenError,
    InternalError,
    NarratopiaError,
    NotFoundError,
    UnauthorizedError,
)
from .logging import get_logger, init_logging
from .wordcount import count_words

__all__ = [
    "count_words",
    "load_env",
    "get_settings",
    "get_logger",
    "init_logging",
    "NarratopiaError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "BadRequestError",
    "InternalError",
]
