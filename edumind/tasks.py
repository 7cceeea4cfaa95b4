"""Task CRUD, sorting and filtering for EduMind.

Operations mutate the list in place and return what changed; invalid input
is a silent no-op (None/False), never an exception.
"""

from __future__ import annotations

import time

from edumind.models import PRIORITIES, PRIORITY_WEIGHT, Task, new_id


SORT_OPTIONS = ("date", "priority", "status")
FILTER_OPTIONS = ("all",) + PRIORITIES


# ── CRUD ──────────────────────────────────────────────────────


def find_task(tasks: list[Task], task_id: str) -> Task | None:
    """Find a task by ID."""
    for t in tasks:
        if t.id == task_id:
            return t
    return None


def add_task(tasks: list[Task], title: str, priority: str = "medium") -> Task | None:
    """Create a task and put it first (newest-first order).

    Returns None without touching *tasks* when the title is blank or the
    priority is unknown.
    """
    title = (title or "").strip()
    if not title or priority not in PRIORITIES:
        return None
    task = Task(
        id=new_id(),
        title=title,
        completed=False,
        priority=priority,
        estimated_pomodoros=1,
        completed_pomodoros=0,
        created_at=int(time.time() * 1000),
    )
    tasks.insert(0, task)
    return task


def toggle_task(tasks: list[Task], task_id: str) -> Task | None:
    task = find_task(tasks, task_id)
    if task is None:
        return None
    task.completed = not task.completed
    return task


def delete_task(tasks: list[Task], task_id: str) -> bool:
    """Remove a task by ID. Returns False if it was not there."""
    for i, t in enumerate(tasks):
        if t.id == task_id:
            tasks.pop(i)
            return True
    return False


# ── Views ─────────────────────────────────────────────────────


def sort_tasks(tasks: list[Task], by: str = "date") -> list[Task]:
    """Return a sorted copy.

    - date: newest created_at first
    - priority: high -> low, ties keep current order
    - status: pending before completed, ties keep current order
    """
    if by == "priority":
        return sorted(tasks, key=lambda t: PRIORITY_WEIGHT.get(t.priority, 0), reverse=True)
    if by == "status":
        return sorted(tasks, key=lambda t: t.completed)
    return sorted(tasks, key=lambda t: t.created_at or 0, reverse=True)


def filter_tasks(tasks: list[Task], priority: str = "all") -> list[Task]:
    if priority == "all" or priority not in PRIORITIES:
        return list(tasks)
    return [t for t in tasks if t.priority == priority]


def pending_count(tasks: list[Task]) -> int:
    return sum(1 for t in tasks if not t.completed)
