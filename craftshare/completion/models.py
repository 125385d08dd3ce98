"""Data structures returned by the completion rollup."""

from __future__ import annotations

from dataclasses import dataclass, field

from craftshare.models import TaskStatus


@dataclass(slots=True)
class CompletionStatus:
    project_id: int
    is_completed: bool
    status_counts: dict[TaskStatus, int] = field(default_factory=dict)

    @property
    def total_tasks(self) -> int:
        return sum(self.status_counts.values())

    @property
    def completed_tasks(self) -> int:
        return self.status_counts.get(TaskStatus.COMPLETED, 0)

    def to_dict(self) -> dict:
        return {
            "project_id": self.project_id,
            "is_completed": self.is_completed,
            "total_tasks": self.total_tasks,
            "tasks_by_status": {
                status.value: self.status_counts.get(status, 0) for status in TaskStatus
            },
        }
