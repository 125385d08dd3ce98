"""Task routes.

Task edits never touch the project's completion flag; callers recompute it
through the completion routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from sqlalchemy import select

from craftshare.db.connection import get_session
from craftshare.db.models import ProjectModel, TaskModel, UserModel
from craftshare.web.dependencies import require_row
from craftshare.web.models import TaskCreate, TaskUpdate

router = APIRouter(tags=["tasks"])


def _task_to_dict(task: TaskModel) -> dict:
    return {
        "id": task.id,
        "description": task.description,
        "comment": task.comment,
        "status": task.status,
        "user_id": task.user_id,
        "project_id": task.project_id,
    }


@router.post("/api/projects/{project_id}/tasks", status_code=201)
async def create_task(project_id: int, task_data: TaskCreate):
    """Add a task to a project, assigned to ``task_data.user_id``."""
    async with get_session() as session:
        await require_row(session, ProjectModel, project_id, "Project")
        await require_row(session, UserModel, task_data.user_id, "User")

        task = TaskModel(
            description=task_data.description,
            comment=task_data.comment,
            status=task_data.status.value,
            user_id=task_data.user_id,
            project_id=project_id,
        )
        session.add(task)
        await session.flush()
        return _task_to_dict(task)


@router.patch("/api/tasks/{task_id}")
async def update_task(task_id: int, changes: TaskUpdate):
    """Edit a task. Status is simply overwritten."""
    async with get_session() as session:
        task = await require_row(session, TaskModel, task_id, "Task")

        updates = changes.model_dump(exclude_unset=True, exclude_none=True)
        if "status" in updates:
            updates["status"] = updates["status"].value
        for field_name, value in updates.items():
            setattr(task, field_name, value)

        await session.flush()
        return _task_to_dict(task)


@router.get("/api/projects/{project_id}/tasks")
async def list_project_tasks(project_id: int, user_id: int | None = None):
    """List a project's tasks, optionally only those assigned to ``user_id``."""
    async with get_session() as session:
        await require_row(session, ProjectModel, project_id, "Project")
        stmt = select(TaskModel).where(TaskModel.project_id == project_id)
        if user_id is not None:
            stmt = stmt.where(TaskModel.user_id == user_id)
        result = await session.execute(stmt.order_by(TaskModel.id.asc()))
        return [_task_to_dict(t) for t in result.scalars().all()]


@router.get("/api/users/{user_id}/tasks")
async def list_user_tasks(user_id: int):
    """List every task assigned to a user."""
    async with get_session() as session:
        result = await session.execute(
            select(TaskModel).where(TaskModel.user_id == user_id).order_by(TaskModel.id.asc())
        )
        return [_task_to_dict(t) for t in result.scalars().all()]


@router.delete("/api/tasks/{task_id}", status_code=204)
async def delete_task(task_id: int):
    async with get_session() as session:
        task = await require_row(session, TaskModel, task_id, "Task")
        await session.delete(task)
    return Response(status_code=204)
