# src/taskdeck/tasks/reminder_poller.py

from __future__ import annotations

"""
Reminder poller.

A small polling loop that, every interval:
- reads the current task list,
- finds tasks whose reminder is due (see should_show_reminder),
- sends one notification per such task via an injected sink.

There is no "already notified" state: a task keeps firing on every tick
until it is completed or its reminder is cleared or moved.
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from ..core.ports import Clock, NotificationSink, SystemClock
from .task_models import Task
from .task_view import should_show_reminder

logger = logging.getLogger(__name__)

DEFAULT_REMINDER_BODY = "You have a task reminder!"

TaskSource = Callable[[], Iterable[Task]]


@dataclass(slots=True, frozen=True)
class Reminder:
    title: str
    body: str


def build_reminder(task: Task) -> Reminder:
    return Reminder(
        title=f"Task Reminder: {task.title}",
        body=task.description or DEFAULT_REMINDER_BODY,
    )


def check_reminders(
    tasks: Iterable[Task],
    notifier: NotificationSink,
    now: datetime,
) -> list[Task]:
    """One poll tick. Returns the tasks a notification was attempted for."""
    fired: list[Task] = []
    for task in tasks:
        if not should_show_reminder(task, now):
            continue
        fired.append(task)
        reminder = build_reminder(task)
        try:
            notifier.notify(reminder.title, reminder.body)
        except Exception:
            logger.exception("Reminder notification failed task_id=%s", task.id)
    if fired:
        logger.info("Reminder tick: %d task(s) due", len(fired))
    return fired


async def run_reminder_poller(
        source: TaskSource,
        notifier: NotificationSink,
        *,
        clock: Clock | None = None,
        interval_seconds: float = 60.0,
) -> None:
    """
    Simple polling loop: sleep interval_seconds, then tick.

    The task list is snapshotted on the loop; only the notifier calls run in
    a worker thread.

    The first tick happens one full interval after start.
    To stop the poller, cancel the coroutine/task.
    """
    clock = clock or SystemClock()
    sleep_s = max(0.05, float(interval_seconds))

    while True:
        await asyncio.sleep(sleep_s)

        try:
            tasks = list(source())
        except Exception:
            logger.exception("Reading tasks for reminder check failed")
            continue

        # Native notifiers shell out; keep the loop (and the console) free.
        await asyncio.to_thread(check_reminders, tasks, notifier, clock.now())


class ReminderPoller:
    """
    Owns the background reminder task.

    start() acquires the timer, stop() releases it; both are idempotent.
    Use as `async with ReminderPoller(...)` to guarantee teardown.
    """

    def __init__(
        self,
        source: TaskSource,
        notifier: NotificationSink,
        *,
        clock: Clock | None = None,
        interval_seconds: float = 60.0,
    ) -> None:
        self._source = source
        self._notifier = notifier
        self._clock = clock
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(
            run_reminder_poller(
                self._source,
                self._notifier,
                clock=self._clock,
                interval_seconds=self._interval,
            ),
            name="reminder-poller",
        )
        logger.info("Reminder poller started (interval=%ss)", self._interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Reminder poller stopped.")

    async def __aenter__(self) -> ReminderPoller:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
