# src/taskdeck/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (storage/store/view/notifier).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import Clock, KeyValueStore, NotificationSink, SystemClock
from ..core.state import AppState
from ..notify.sinks import ConsoleNotificationSink, DesktopNotificationSink, FallbackNotifier
from ..storage.kv_store import SqliteKeyValueStore
from ..tasks.task_models import TaskFilter, TaskSort
from ..tasks.task_store import TaskStore
from ..tasks.task_view import TaskView

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_db_path.parent.mkdir(parents=True, exist_ok=True)


def _view_mode(raw: str, enum_cls, default):
    try:
        return enum_cls(raw)
    except ValueError:
        logger.warning("Unknown %s %r in settings; using %s", enum_cls.__name__, raw, default.value)
        return default


def create_notifier(settings) -> NotificationSink:
    desktop = DesktopNotificationSink(
        enabled=bool(getattr(settings, "desktop_notifications", True)),
        app_name=str(getattr(settings, "app_name", "taskdeck")),
    )
    return FallbackNotifier(primary=desktop, fallback=ConsoleNotificationSink())


def create_initial_state(
    *,
    settings=None,
    kv: KeyValueStore | None = None,
    notifier: NotificationSink | None = None,
    clock: Clock | None = None,
) -> AppState:
    """
    Create AppState from the provided settings and load stored tasks.

    Keeping settings and collaborators injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    clock = clock or SystemClock()

    if kv is None:
        _ensure_local_dirs(settings)
        kv = SqliteKeyValueStore(settings.store_db_path)

    store = TaskStore(kv, storage_key=settings.storage_key, clock=clock)
    store.load()

    view = TaskView(
        store,
        clock=clock,
        filter_mode=_view_mode(settings.default_filter, TaskFilter, TaskFilter.ALL),
        sort_mode=_view_mode(settings.default_sort, TaskSort, TaskSort.DUE_DATE),
    )

    return AppState(
        settings=settings,
        store=store,
        view=view,
        notifier=notifier or create_notifier(settings),
        clock=clock,
    )
