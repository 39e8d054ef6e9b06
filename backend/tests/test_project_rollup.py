from __future__ import annotations

import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from db.schemas import Project, ProjectStatus, Task  # noqa: E402
from services.project_rollup_service import apply_rollup, rollup  # noqa: E402


def _project(**overrides) -> Project:
    data = {"id": "launch", "name": "Launch", "start_date": "2026-02-01", "end_date": "2026-03-01"}
    data.update(overrides)
    return Project(**data)


def _tasks(done_flags: list[bool], project_id: str = "launch") -> list[Task]:
    return [
        Task(id=f"{project_id}-{idx}", title=f"Task {idx}", due_date="2026-02-20", project_id=project_id, completed=done)
        for idx, done in enumerate(done_flags)
    ]


def test_no_linked_tasks_means_zero_progress():
    result = rollup(_project(), [])
    assert result.progress == 0
    assert result.status == ProjectStatus.ACTIVE


def test_progress_is_rounded_percentage_of_completed_tasks():
    assert rollup(_project(), _tasks([True, False, False])).progress == 33
    assert rollup(_project(), _tasks([True, True, False])).progress == 67
    assert rollup(_project(), _tasks([True] + [False] * 7)).progress == 13


def test_status_tracks_full_completion_both_ways():
    done = apply_rollup(_project(), _tasks([True, True]))
    assert done.progress == 100
    assert done.status == ProjectStatus.COMPLETED

    reopened = apply_rollup(done, _tasks([True, False]))
    assert reopened.progress == 50
    assert reopened.status == ProjectStatus.ACTIVE


def test_archived_status_is_sticky():
    archived = _project(status=ProjectStatus.ARCHIVED)
    result = apply_rollup(archived, _tasks([True, True]))
    assert result.progress == 100
    assert result.status == ProjectStatus.ARCHIVED


def test_only_tasks_linked_to_the_project_count():
    tasks = _tasks([True], "launch") + _tasks([False, False, False], "other")
    assert rollup(_project(), tasks).progress == 100


def test_recompute_is_idempotent():
    tasks = _tasks([True, False, True])
    once = apply_rollup(_project(), tasks)
    twice = apply_rollup(once, tasks)
    assert (once.progress, once.status) == (twice.progress, twice.status)
