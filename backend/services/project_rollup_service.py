from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from db.schemas import Project, ProjectStatus, Task
from utils.units import completion_pct


@dataclass(frozen=True)
class ProjectRollup:
    progress: int
    status: ProjectStatus


def rollup(project: Project, tasks: Iterable[Task]) -> ProjectRollup:
    """Progress over the tasks linked to project; archived status is never overridden."""
    linked = [row for row in tasks if row.project_id == project.id]
    completed = sum(1 for row in linked if row.completed)
    progress = completion_pct(len(linked), completed)
    if project.status == ProjectStatus.ARCHIVED:
        status = ProjectStatus.ARCHIVED
    elif progress == 100:
        status = ProjectStatus.COMPLETED
    else:
        status = ProjectStatus.ACTIVE
    return ProjectRollup(progress=progress, status=status)


def apply_rollup(project: Project, tasks: Iterable[Task]) -> Project:
    result = rollup(project, tasks)
    return project.model_copy(update={"progress": result.progress, "status": result.status})
