# src/taskdeck/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.task_store import TaskStore
from ..tasks.task_view import TaskView
from .ports import Clock, NotificationSink


@dataclass
class AppState:
    # Settings are kept on the state for easy access in commands/connectors.
    settings: object

    store: TaskStore
    view: TaskView
    notifier: NotificationSink
    clock: Clock
