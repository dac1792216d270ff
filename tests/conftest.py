# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskdeck.cli.bootstrap import create_initial_state
from taskdeck.core.state import AppState
from taskdeck.tasks.task_store import TaskStore

from .fakes import FakeClock, MemoryKeyValueStore, RecordingNotifier, sequential_ids


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the console.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskdeck-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        store_db_path=tmp_path / "taskdeck.sqlite3",
        storage_key="task-management-tasks",
        reminder_interval_seconds=60.0,
        desktop_notifications=False,
        default_filter="all",
        default_sort="dueDate",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def store(kv: MemoryKeyValueStore, clock: FakeClock) -> TaskStore:
    s = TaskStore(kv, clock=clock, id_factory=sequential_ids())
    s.load()
    return s


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FakeClock, notifier: RecordingNotifier) -> AppState:
    """
    AppState wired with deterministic fakes.

    NOTE: the real SQLite key-value store is used here because its
    durability is part of what we want to test.
    """
    return create_initial_state(settings=settings, notifier=notifier, clock=clock)
