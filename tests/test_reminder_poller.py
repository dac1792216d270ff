# tests/test_reminder_poller.py

from __future__ import annotations

import asyncio
import contextlib
import threading
from datetime import timedelta

import pytest

from taskdeck.tasks.reminder_poller import (
    DEFAULT_REMINDER_BODY,
    ReminderPoller,
    build_reminder,
    check_reminders,
    run_reminder_poller,
)
from taskdeck.tasks.task_store import TaskStore

from .fakes import FakeClock, RecordingNotifier


def test_build_reminder_uses_description_or_default(store: TaskStore) -> None:
    with_desc = store.add(title="Call mom", description="Sunday call")
    without = store.add(title="Stretch")

    assert build_reminder(with_desc).title == "Task Reminder: Call mom"
    assert build_reminder(with_desc).body == "Sunday call"
    assert build_reminder(without).body == DEFAULT_REMINDER_BODY


def test_check_reminders_fires_only_due_incomplete(
    store: TaskStore, clock: FakeClock, notifier: RecordingNotifier
) -> None:
    now = clock.now()
    due = store.add(title="due", reminder_date=now)
    store.add(title="future", reminder_date=now + timedelta(minutes=5))
    store.add(title="done", reminder_date=now - timedelta(hours=1), completed=True)
    store.add(title="no reminder")

    fired = check_reminders(store.tasks, notifier, now)

    assert [t.id for t in fired] == [due.id]
    assert [n.title for n in notifier.sent] == ["Task Reminder: due"]


def test_check_reminders_repeats_every_tick(
    store: TaskStore, clock: FakeClock, notifier: RecordingNotifier
) -> None:
    store.add(title="nag", reminder_date=clock.now() - timedelta(minutes=1))

    check_reminders(store.tasks, notifier, clock.now())
    check_reminders(store.tasks, notifier, clock.advance(minutes=1))

    assert len(notifier.sent) == 2


def test_check_reminders_survives_failing_notifier(store: TaskStore, clock: FakeClock) -> None:
    store.add(title="a", reminder_date=clock.now())
    store.add(title="b", reminder_date=clock.now())

    fired = check_reminders(store.tasks, RecordingNotifier(fail=True), clock.now())
    assert len(fired) == 2


@pytest.mark.asyncio
async def test_poller_loop_notifies_until_cancelled(
    store: TaskStore, clock: FakeClock, notifier: RecordingNotifier
) -> None:
    store.add(title="water plants", reminder_date=clock.now() - timedelta(minutes=1))

    runner = asyncio.create_task(
        run_reminder_poller(lambda: store.tasks, notifier, clock=clock, interval_seconds=0.05)
    )

    await asyncio.sleep(0.3)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert notifier.sent, "Poller should notify at least once"
    assert notifier.sent[0].title == "Task Reminder: water plants"


@pytest.mark.asyncio
async def test_poller_reads_fresh_state_each_tick(
    store: TaskStore, clock: FakeClock, notifier: RecordingNotifier
) -> None:
    task = store.add(title="stand up", reminder_date=clock.now())
    store.update(task.id, completed=True)

    async with ReminderPoller(lambda: store.tasks, notifier, clock=clock, interval_seconds=0.05):
        await asyncio.sleep(0.2)

    assert notifier.sent == []


@pytest.mark.asyncio
async def test_reminder_poller_start_stop_is_idempotent(store: TaskStore, notifier: RecordingNotifier) -> None:
    poller = ReminderPoller(lambda: store.tasks, notifier, interval_seconds=60)

    poller.start()
    poller.start()
    assert poller.running

    await poller.stop()
    await poller.stop()
    assert not poller.running


@pytest.mark.asyncio
async def test_context_manager_stops_poller_on_error(store: TaskStore, notifier: RecordingNotifier) -> None:
    poller = ReminderPoller(lambda: store.tasks, notifier, interval_seconds=60)

    with pytest.raises(RuntimeError):
        async with poller:
            assert poller.running
            raise RuntimeError("boom")

    assert not poller.running


@pytest.mark.asyncio
async def test_failing_source_does_not_kill_poller(notifier: RecordingNotifier, clock: FakeClock) -> None:
    calls = {"n": 0}

    def source():
        calls["n"] += 1
        raise OSError("store unavailable")

    async with ReminderPoller(source, notifier, clock=clock, interval_seconds=0.05) as poller:
        await asyncio.sleep(0.25)
        assert poller.running

    assert calls["n"] >= 2


@pytest.mark.asyncio
async def test_slow_notifier_runs_off_the_event_loop(store: TaskStore, clock: FakeClock) -> None:
    store.add(title="slow", reminder_date=clock.now())
    entered = threading.Event()
    release = threading.Event()
    result: dict[str, bool] = {}

    class SlowNotifier:
        def notify(self, title: str, body: str) -> None:
            entered.set()
            result["released"] = release.wait(2.0)

    runner = asyncio.create_task(
        run_reminder_poller(lambda: store.tasks, SlowNotifier(), clock=clock, interval_seconds=0.05)
    )
    for _ in range(100):
        if entered.is_set():
            break
        await asyncio.sleep(0.01)
    assert entered.is_set()

    # The loop is still responsive while the notifier blocks.
    release.set()
    for _ in range(100):
        if "released" in result:
            break
        await asyncio.sleep(0.01)

    runner.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await runner

    assert result["released"] is True
