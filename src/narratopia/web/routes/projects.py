# src/narratopia/web/routes/projects.py
"""Project cascade endpoint."""

from uuid import UUID

from fastapi import APIRouter

from narratopia.canon import projects
from narratopia.models import MessageResponse
from narratopia.web.deps import CallerDep, SessionDep

router = APIRouter(prefix="/api", tags=["projects"])


@router.delete("/projects/{project_id}", response_model=MessageResponse)
async def delete_project(project_id: UUID, session: SessionDep, caller_id: CallerDep):
    await projects.delete_project(session, project_id, caller_id)
    return MessageResponse(message="Project deleted successfully")
