"""Projects management routes.

Handles project creation, edits and deletion. Titles are unique per creator.
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from sqlalchemy import delete, select

from craftshare.db.connection import get_session
from craftshare.db.models import ProjectModel, TaskModel, UserModel
from craftshare.errors import ConflictError, NotFoundError
from craftshare.inventory import InventoryLedger
from craftshare.models import ResourceKind
from craftshare.web.dependencies import require_row
from craftshare.web.models import ProjectCreate, ProjectUpdate

router = APIRouter(tags=["projects"])


def _project_to_dict(project: ProjectModel) -> dict:
    return {
        "id": project.id,
        "title": project.title,
        "description": project.description,
        "group_size": project.group_size,
        "difficulty": project.difficulty,
        "category": project.category,
        "creator_id": project.creator_id,
        "cost": float(project.cost),
        "is_completed": project.is_completed,
    }


async def _ensure_title_free(session, creator_id: int, title: str, exclude_id: int | None = None):
    stmt = select(ProjectModel.id).where(
        ProjectModel.creator_id == creator_id,
        ProjectModel.title == title,
    )
    if exclude_id is not None:
        stmt = stmt.where(ProjectModel.id != exclude_id)
    if (await session.execute(stmt)).first() is not None:
        raise ConflictError("Project with the same title already exists for this user")


@router.post("/api/users/{creator_id}/projects", status_code=201)
async def create_project(creator_id: int, project_data: ProjectCreate):
    """Create a new project owned by ``creator_id``."""
    async with get_session() as session:
        await require_row(session, UserModel, creator_id, "User")
        await _ensure_title_free(session, creator_id, project_data.title)

        project = ProjectModel(
            title=project_data.title,
            description=project_data.description,
            group_size=project_data.group_size,
            difficulty=project_data.difficulty.value,
            category=project_data.category.value,
            creator_id=creator_id,
            cost=project_data.cost,
            is_completed=False,
        )
        session.add(project)
        await session.flush()
        payload = _project_to_dict(project)

    return payload


@router.get("/api/projects/{project_id}")
async def get_project(project_id: int):
    """Get a single project by ID."""
    async with get_session() as session:
        project = await require_row(session, ProjectModel, project_id, "Project")
        return _project_to_dict(project)


@router.get("/api/users/{creator_id}/projects")
async def list_projects(creator_id: int):
    """List the projects created by a user."""
    async with get_session() as session:
        result = await session.execute(
            select(ProjectModel)
            .where(ProjectModel.creator_id == creator_id)
            .order_by(ProjectModel.id.asc())
        )
        projects = result.scalars().all()
        return [_project_to_dict(p) for p in projects]


@router.patch("/api/projects/{project_id}")
async def update_project(project_id: int, changes: ProjectUpdate):
    """Edit project fields. Only provided fields change."""
    async with get_session() as session:
        project = await require_row(session, ProjectModel, project_id, "Project")

        updates = changes.model_dump(exclude_unset=True, exclude_none=True)
        if "title" in updates and updates["title"] != project.title:
            await _ensure_title_free(session, project.creator_id, updates["title"], project.id)

        for field_name, value in updates.items():
            if field_name in ("difficulty", "category"):
                value = value.value
            setattr(project, field_name, value)

        await session.flush()
        return _project_to_dict(project)


@router.delete("/api/users/{creator_id}/projects/{project_id}", status_code=204)
async def delete_project(creator_id: int, project_id: int):
    """Delete a project owned by ``creator_id``.

    Committed materials and tools are released back to their owners first.
    """
    async with get_session() as session:
        result = await session.execute(
            select(ProjectModel).where(
                ProjectModel.id == project_id,
                ProjectModel.creator_id == creator_id,
            )
        )
        project = result.scalar_one_or_none()
        if project is None:
            raise NotFoundError("Project not found or not owned by the specified creator")

        for kind in ResourceKind:
            await InventoryLedger(session, kind).release_project(project_id)

        await session.execute(delete(TaskModel).where(TaskModel.project_id == project_id))
        await session.delete(project)

    return Response(status_code=204)
