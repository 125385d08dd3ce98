"""Project completion rollup.

A project is completed when it has at least one task and every task is
``completed``. A project without tasks is never marked completed. The flag is
recomputed only when a caller asks for it; task edits do not trigger it.
"""

from __future__ import annotations

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from craftshare.completion.models import CompletionStatus
from craftshare.db.models import ProjectModel, TaskModel
from craftshare.errors import NotFoundError
from craftshare.models import TaskStatus

logger = structlog.get_logger(__name__)


def is_complete(status_counts: dict[TaskStatus, int]) -> bool:
    total = sum(status_counts.values())
    return total > 0 and status_counts.get(TaskStatus.COMPLETED, 0) == total


async def recompute_completion(session: AsyncSession, project_id: int) -> CompletionStatus:
    """Derive and persist ``ProjectModel.is_completed`` from the project's tasks.

    The flag moves in both directions: reopening a task of a completed project
    clears it on the next recompute.

    Raises:
        NotFoundError: If the project does not exist
    """
    project = await _require_project(session, project_id)
    counts = await _count_tasks(session, project_id)

    completed = is_complete(counts)
    previous = project.is_completed
    if previous != completed:
        project.is_completed = completed
        await session.flush()

    status = CompletionStatus(project_id=project_id, is_completed=completed, status_counts=counts)
    logger.info(
        "completion_recomputed",
        project_id=project_id,
        is_completed=completed,
        changed=previous != completed,
        total_tasks=status.total_tasks,
        completed_tasks=status.completed_tasks,
    )
    return status


async def get_completion(session: AsyncSession, project_id: int) -> CompletionStatus:
    """Return the stored completion flag with current task counts (no recompute)."""
    project = await _require_project(session, project_id)
    counts = await _count_tasks(session, project_id)
    return CompletionStatus(
        project_id=project_id,
        is_completed=project.is_completed,
        status_counts=counts,
    )


async def _require_project(session: AsyncSession, project_id: int) -> ProjectModel:
    result = await session.execute(
        select(ProjectModel)
        .where(ProjectModel.id == project_id)
        .execution_options(populate_existing=True)
    )
    project = result.scalar_one_or_none()
    if project is None:
        raise NotFoundError(f"Project {project_id} not found")
    return project


async def _count_tasks(session: AsyncSession, project_id: int) -> dict[TaskStatus, int]:
    stmt = (
        select(TaskModel.status, func.count(TaskModel.id))
        .where(TaskModel.project_id == project_id)
        .group_by(TaskModel.status)
    )
    rows = await session.execute(stmt)
    return {TaskStatus(status): count for status, count in rows.all()}
