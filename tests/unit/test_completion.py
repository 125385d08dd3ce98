"""Tests for the project completion rollup."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from craftshare.completion import get_completion, is_complete, recompute_completion
from craftshare.db.models import ProjectModel, TaskModel
from craftshare.errors import NotFoundError
from craftshare.models import TaskStatus


async def _add_tasks(session: AsyncSession, seed, statuses: list[str]) -> list[TaskModel]:
    tasks = [
        TaskModel(
            description=f"Task {i}",
            comment="",
            status=status,
            user_id=seed.helper_id,
            project_id=seed.project_id,
        )
        for i, status in enumerate(statuses)
    ]
    session.add_all(tasks)
    await session.flush()
    return tasks


def test_is_complete_requires_tasks():
    assert is_complete({}) is False
    assert is_complete({TaskStatus.COMPLETED: 2}) is True
    assert is_complete({TaskStatus.COMPLETED: 2, TaskStatus.PENDING: 1}) is False
    assert is_complete({TaskStatus.IN_PROGRESS: 1}) is False


@pytest.mark.asyncio
async def test_recompute_tracks_pending_then_completed(db_session: AsyncSession, seed):
    """[completed, completed, pending] is open; finishing the last task completes it."""
    tasks = await _add_tasks(db_session, seed, ["completed", "completed", "pending"])

    status = await recompute_completion(db_session, seed.project_id)
    assert status.is_completed is False
    assert status.total_tasks == 3
    assert status.completed_tasks == 2

    tasks[2].status = TaskStatus.COMPLETED.value
    await db_session.flush()

    status = await recompute_completion(db_session, seed.project_id)
    assert status.is_completed is True

    project = await db_session.get(ProjectModel, seed.project_id)
    assert project.is_completed is True


@pytest.mark.asyncio
async def test_project_without_tasks_is_not_completed(db_session: AsyncSession, seed):
    status = await recompute_completion(db_session, seed.project_id)

    assert status.is_completed is False
    assert status.total_tasks == 0


@pytest.mark.asyncio
async def test_recompute_is_idempotent(db_session: AsyncSession, seed):
    await _add_tasks(db_session, seed, ["completed", "in progress"])

    first = await recompute_completion(db_session, seed.project_id)
    second = await recompute_completion(db_session, seed.project_id)

    assert first.is_completed == second.is_completed
    assert first.status_counts == second.status_counts


@pytest.mark.asyncio
async def test_reopening_a_task_clears_completion(db_session: AsyncSession, seed):
    tasks = await _add_tasks(db_session, seed, ["completed"])
    assert (await recompute_completion(db_session, seed.project_id)).is_completed is True

    tasks[0].status = TaskStatus.IN_PROGRESS.value
    await db_session.flush()

    assert (await recompute_completion(db_session, seed.project_id)).is_completed is False


@pytest.mark.asyncio
async def test_task_edits_do_not_update_flag_until_recompute(db_session: AsyncSession, seed):
    tasks = await _add_tasks(db_session, seed, ["pending"])
    await recompute_completion(db_session, seed.project_id)

    tasks[0].status = TaskStatus.COMPLETED.value
    await db_session.flush()

    stored = await get_completion(db_session, seed.project_id)
    assert stored.is_completed is False
    assert stored.completed_tasks == 1

    assert (await recompute_completion(db_session, seed.project_id)).is_completed is True


@pytest.mark.asyncio
async def test_other_projects_tasks_are_ignored(db_session: AsyncSession, seed):
    await _add_tasks(db_session, seed, ["completed"])
    db_session.add(
        TaskModel(
            description="Unrelated",
            status="pending",
            user_id=seed.helper_id,
            project_id=seed.other_project_id,
        )
    )
    await db_session.flush()

    assert (await recompute_completion(db_session, seed.project_id)).is_completed is True


@pytest.mark.asyncio
async def test_missing_project_is_not_found(db_session: AsyncSession, seed):
    with pytest.raises(NotFoundError):
        await recompute_completion(db_session, 999)

    with pytest.raises(NotFoundError):
        await get_completion(db_session, 999)


def test_completion_status_to_dict_lists_every_status():
    from craftshare.completion import CompletionStatus

    status = CompletionStatus(
        project_id=1,
        is_completed=False,
        status_counts={TaskStatus.PENDING: 2},
    )

    assert status.to_dict() == {
        "project_id": 1,
        "is_completed": False,
        "total_tasks": 2,
        "tasks_by_status": {"pending": 2, "in progress": 0, "completed": 0},
    }
