# src/taskdeck/tasks/task_view.py

from __future__ import annotations

"""
Derived projections of the task list.

Everything here is a pure function of (tasks, now) except TaskView, which
only remembers the user's current filter/sort selection and reads the store.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from ..core.ports import Clock, SystemClock
from .task_models import Task, TaskFilter, TaskSort
from .task_store import TaskStore


@dataclass(slots=True, frozen=True)
class TaskFlags:
    overdue: bool
    due_today: bool
    reminder_due: bool


@dataclass(slots=True, frozen=True)
class TaskRow:
    task: Task
    flags: TaskFlags


@dataclass(slots=True, frozen=True)
class TaskCounts:
    all: int
    active: int
    completed: int
    overdue: int

    def for_filter(self, mode: TaskFilter) -> int:
        return int(getattr(self, mode.value))


def _now(now: datetime | None) -> datetime:
    return now if now is not None else SystemClock().now()


# ---- predicates ----


def is_overdue(task: Task, now: datetime | None = None) -> bool:
    if task.due_date is None or task.completed:
        return False
    return task.due_date < _now(now)


def is_due_today(task: Task, now: datetime | None = None) -> bool:
    # Deliberately not suppressed by `completed`.
    if task.due_date is None:
        return False
    now = _now(now)
    return task.due_date.astimezone(now.tzinfo).date() == now.date()


def should_show_reminder(task: Task, now: datetime | None = None) -> bool:
    if task.reminder_date is None or task.completed:
        return False
    return task.reminder_date <= _now(now)


def annotate(task: Task, now: datetime | None = None) -> TaskFlags:
    now = _now(now)
    return TaskFlags(
        overdue=is_overdue(task, now),
        due_today=is_due_today(task, now),
        reminder_due=should_show_reminder(task, now),
    )


# ---- filter / sort / counts ----


def matches_filter(task: Task, mode: TaskFilter, now: datetime | None = None) -> bool:
    if mode == TaskFilter.ACTIVE:
        return not task.completed
    if mode == TaskFilter.COMPLETED:
        return task.completed
    if mode == TaskFilter.OVERDUE:
        return is_overdue(task, now)
    return True


def filter_tasks(
    tasks: Iterable[Task], mode: TaskFilter | str, now: datetime | None = None
) -> list[Task]:
    mode = TaskFilter(mode)
    now = _now(now)
    return [t for t in tasks if matches_filter(t, mode, now)]


def sort_tasks(tasks: Iterable[Task], mode: TaskSort | str) -> list[Task]:
    """
    Stable sort; equal keys keep their input order.

    dueDate:  ascending, undated tasks last
    priority: high -> low
    created:  newest first
    """
    mode = TaskSort(mode)
    items = list(tasks)

    if mode == TaskSort.DUE_DATE:
        dated = sorted((t for t in items if t.due_date is not None), key=lambda t: t.due_date)
        return dated + [t for t in items if t.due_date is None]

    if mode == TaskSort.PRIORITY:
        return sorted(items, key=lambda t: -t.priority.rank)

    # reverse=True keeps equal keys in input order.
    return sorted(items, key=lambda t: t.created_at, reverse=True)


def count_tasks(tasks: Sequence[Task], now: datetime | None = None) -> TaskCounts:
    now = _now(now)
    return TaskCounts(
        all=len(tasks),
        active=sum(1 for t in tasks if matches_filter(t, TaskFilter.ACTIVE, now)),
        completed=sum(1 for t in tasks if matches_filter(t, TaskFilter.COMPLETED, now)),
        overdue=sum(1 for t in tasks if matches_filter(t, TaskFilter.OVERDUE, now)),
    )


class TaskView:
    """Current filter/sort selection over a TaskStore."""

    def __init__(
        self,
        store: TaskStore,
        *,
        clock: Clock | None = None,
        filter_mode: TaskFilter | str = TaskFilter.ALL,
        sort_mode: TaskSort | str = TaskSort.DUE_DATE,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self.filter_mode = TaskFilter(filter_mode)
        self.sort_mode = TaskSort(sort_mode)

    def set_filter(self, mode: TaskFilter | str) -> TaskFilter:
        try:
            self.filter_mode = TaskFilter(mode)
        except ValueError:
            allowed = ", ".join(f.value for f in TaskFilter)
            raise ValueError(f"Invalid filter: {mode!r}. Allowed: {allowed}") from None
        return self.filter_mode

    def set_sort(self, mode: TaskSort | str) -> TaskSort:
        try:
            self.sort_mode = TaskSort(mode)
        except ValueError:
            allowed = ", ".join(s.value for s in TaskSort)
            raise ValueError(f"Invalid sort: {mode!r}. Allowed: {allowed}") from None
        return self.sort_mode

    def visible(self) -> list[TaskRow]:
        now = self._clock.now()
        tasks = sort_tasks(filter_tasks(self._store.tasks, self.filter_mode, now), self.sort_mode)
        return [TaskRow(task=t, flags=annotate(t, now)) for t in tasks]

    def counts(self) -> TaskCounts:
        return count_tasks(self._store.tasks, self._clock.now())
