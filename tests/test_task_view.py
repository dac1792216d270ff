# tests/test_task_view.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from taskdeck.tasks.task_models import Priority, Task, TaskFilter, TaskSort
from taskdeck.tasks.task_store import TaskStore
from taskdeck.tasks.task_view import (
    TaskView,
    annotate,
    count_tasks,
    filter_tasks,
    is_due_today,
    is_overdue,
    should_show_reminder,
    sort_tasks,
)

from .fakes import FakeClock

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _task(id: str, **overrides) -> Task:
    base = dict(
        id=id,
        title=f"task {id}",
        description="",
        due_date=None,
        priority=Priority.MEDIUM,
        completed=False,
        reminder_date=None,
        created_at=NOW - timedelta(days=1),
    )
    base.update(overrides)
    return Task(**base)


def test_completed_suppresses_overdue_and_reminder() -> None:
    past = NOW - timedelta(days=3)
    for due, remind in [(past, past), (NOW, NOW), (None, past), (past, None)]:
        t = _task("x", due_date=due, reminder_date=remind, completed=True)
        assert is_overdue(t, NOW) is False
        assert should_show_reminder(t, NOW) is False


def test_due_today_ignores_completed() -> None:
    t = _task("x", due_date=NOW.replace(hour=18), completed=True)
    assert is_due_today(t, NOW) is True
    assert is_overdue(t, NOW) is False


def test_overdue_is_strict_and_reminder_is_not() -> None:
    t = _task("x", due_date=NOW, reminder_date=NOW)
    assert is_overdue(t, NOW) is False
    assert should_show_reminder(t, NOW) is True

    later = NOW + timedelta(microseconds=1)
    assert is_overdue(t, later) is True


def test_due_today_uses_calendar_date_of_now() -> None:
    assert is_due_today(_task("a", due_date=NOW.replace(hour=0, minute=0)), NOW) is True
    assert is_due_today(_task("b", due_date=NOW + timedelta(days=1)), NOW) is False
    assert is_due_today(_task("c"), NOW) is False


def test_undated_task_is_never_overdue_or_reminded() -> None:
    t = _task("x")
    assert annotate(t, NOW) == annotate(t, NOW + timedelta(days=365))
    flags = annotate(t, NOW)
    assert not flags.overdue and not flags.due_today and not flags.reminder_due


def test_filters_keep_input_order() -> None:
    tasks = [
        _task("1", completed=True),
        _task("2", due_date=NOW - timedelta(hours=1)),
        _task("3"),
        _task("4", due_date=NOW - timedelta(hours=1), completed=True),
    ]
    assert [t.id for t in filter_tasks(tasks, TaskFilter.ALL, NOW)] == ["1", "2", "3", "4"]
    assert [t.id for t in filter_tasks(tasks, "active", NOW)] == ["2", "3"]
    assert [t.id for t in filter_tasks(tasks, TaskFilter.COMPLETED, NOW)] == ["1", "4"]
    assert [t.id for t in filter_tasks(tasks, TaskFilter.OVERDUE, NOW)] == ["2"]


def test_counts_partition_active_and_completed() -> None:
    tasks = [
        _task("1", completed=True),
        _task("2", due_date=NOW - timedelta(days=1)),
        _task("3"),
        _task("4", due_date=NOW - timedelta(days=1), completed=True),
        _task("5", due_date=NOW + timedelta(days=1)),
    ]
    counts = count_tasks(tasks, NOW)
    assert counts.all == 5
    assert counts.active + counts.completed == counts.all
    assert counts.active == 3
    assert counts.completed == 2
    assert counts.overdue == 1
    assert counts.for_filter(TaskFilter.OVERDUE) == 1
    assert count_tasks([], NOW).all == 0


def test_sort_by_due_date_puts_undated_last() -> None:
    tasks = [
        _task("none"),
        _task("tomorrow", due_date=NOW + timedelta(days=1)),
        _task("today", due_date=NOW),
    ]
    assert [t.id for t in sort_tasks(tasks, TaskSort.DUE_DATE)] == ["today", "tomorrow", "none"]


def test_sort_by_priority_is_stable() -> None:
    tasks = [
        _task("1", priority=Priority.HIGH),
        _task("2", priority=Priority.HIGH),
        _task("3", priority=Priority.LOW),
    ]
    first = [t.id for t in sort_tasks(tasks, "priority")]
    assert first == ["1", "2", "3"]
    for _ in range(5):
        assert [t.id for t in sort_tasks(tasks, "priority")] == first

    mixed = [_task("l", priority=Priority.LOW), _task("m"), _task("h", priority=Priority.HIGH)]
    assert [t.id for t in sort_tasks(mixed, TaskSort.PRIORITY)] == ["h", "m", "l"]


def test_sort_by_created_newest_first_and_input_untouched() -> None:
    tasks = [
        _task("old", created_at=NOW - timedelta(days=2)),
        _task("new", created_at=NOW),
        _task("mid", created_at=NOW - timedelta(days=1)),
    ]
    snapshot = list(tasks)
    assert [t.id for t in sort_tasks(tasks, TaskSort.CREATED)] == ["new", "mid", "old"]
    assert tasks == snapshot


def test_unknown_modes_raise() -> None:
    with pytest.raises(ValueError):
        filter_tasks([], "someday", NOW)
    with pytest.raises(ValueError):
        sort_tasks([], "alphabetical")


def test_overdue_scenario_through_store(store: TaskStore, clock: FakeClock) -> None:
    task = store.add(title="file taxes", due_date=clock.now() - timedelta(days=1))
    assert is_overdue(store.get(task.id), clock.now()) is True

    store.update(task.id, completed=True)
    assert is_overdue(store.get(task.id), clock.now()) is False


def test_view_applies_selection_and_annotates(store: TaskStore, clock: FakeClock) -> None:
    view = TaskView(store, clock=clock)
    late = store.add(title="late", due_date=clock.now() - timedelta(hours=2))
    clock.advance(minutes=1)
    plain = store.add(title="plain")
    clock.advance(minutes=1)
    soon = store.add(title="soon", due_date=clock.now() + timedelta(hours=2))

    rows = view.visible()
    assert [r.task.id for r in rows] == [late.id, soon.id, plain.id]
    assert rows[0].flags.overdue and rows[0].flags.due_today
    assert not rows[2].flags.due_today

    view.set_filter("overdue")
    assert [r.task.id for r in view.visible()] == [late.id]

    view.set_filter(TaskFilter.ALL)
    view.set_sort("created")
    assert [r.task.id for r in view.visible()] == [soon.id, plain.id, late.id]

    counts = view.counts()
    assert (counts.all, counts.active, counts.completed, counts.overdue) == (3, 3, 0, 1)


def test_view_rejects_unknown_modes(store: TaskStore, clock: FakeClock) -> None:
    view = TaskView(store, clock=clock)
    with pytest.raises(ValueError):
        view.set_filter("later")
    with pytest.raises(ValueError):
        view.set_sort("title")
    assert view.filter_mode is TaskFilter.ALL
    assert view.sort_mode is TaskSort.DUE_DATE


def test_undated_task_counts_as_all_and_active(store: TaskStore, clock: FakeClock) -> None:
    task = store.add(title="someday")
    counts = count_tasks(store.tasks, clock.now())
    assert counts.all == 1 and counts.active == 1 and counts.overdue == 0
    assert should_show_reminder(task, clock.now()) is False
