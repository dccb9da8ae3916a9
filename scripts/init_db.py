# scripts/init_db.py
"""Run Alembic migrations to initialize the manuscript database."""

from __future__ import annotations

import asyncio

from narratopia.canon.db import ensure_schema
from narratopia.core.env import load_env
from narratopia.core.logging import get_logger, init_logging

logger = get_logger(__name__)


async def init_db() -> None:
    """Apply Alembic migrations under the schema advisory lock."""
    logger.info("Applying Alembic migrations to initialize the database")
    try:
        await ensure_schema()
        logger.info("Alembic migrations applied successfully")
    except Exception as e:
        logger.exception("Failed to apply Alembic migrations: %s", e)
        raise


if __name__ == "__main__":  # pragma: no cover - CLI execution
    load_env()
    init_logging()
    asyncio.run(init_db())
