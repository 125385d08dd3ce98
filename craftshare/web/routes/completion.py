"""Project completion routes."""

from __future__ import annotations

from fastapi import APIRouter

from craftshare.completion import get_completion, recompute_completion
from craftshare.db.connection import get_session

router = APIRouter(tags=["completion"])


@router.post("/api/projects/{project_id}/completion")
async def recompute_project_completion(project_id: int):
    """Recompute the completion flag from the project's tasks and store it."""
    async with get_session() as session:
        status = await recompute_completion(session, project_id)
    return status.to_dict()


@router.get("/api/projects/{project_id}/completion")
async def get_project_completion(project_id: int):
    """Stored completion flag plus current task counts."""
    async with get_session() as session:
        status = await get_completion(session, project_id)
    return status.to_dict()
