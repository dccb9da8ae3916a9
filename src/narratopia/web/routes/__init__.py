# src/narratopia/web/routes/__init__.py
from fastapi import APIRouter

from . import chapters, codex, projects, relationships

# Create the router
router = APIRouter()
router.include_router(chapters.router)
router.include_router(codex.router)
router.include_router(relationships.router)
router.include_router(projects.router)

__all__ = ["router"]
