# src/narratopia/canon/__init__.py
"""Database access helpers and operations for the manuscript store."""

from .db import get_pg, lock_project, write_transaction

__all__ = ["get_pg", "lock_project", "write_transaction"]
