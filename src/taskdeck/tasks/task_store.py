# src/taskdeck/tasks/task_store.py

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..core.ports import Clock, IdFactory, KeyValueStore, SystemClock
from .task_codec import decode_tasks, encode_tasks
from .task_models import MUTABLE_FIELDS, Priority, Task, ensure_aware

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "task-management-tasks"


def _new_id() -> str:
    return str(uuid.uuid4())


class TaskStore:
    """
    Owner of the task collection.

    The in-memory list is the single source of truth; every mutation rewrites
    the whole list into the key-value store under one key. Storage order is
    newest-first (add() prepends); display order is derived by the view.

    Unknown ids on update/delete are a no-op, not an error.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
    ) -> None:
        self._kv = kv
        self._key = storage_key
        self._clock = clock or SystemClock()
        self._new_id = id_factory or _new_id
        self._tasks: list[Task] = []

    # ---- persistence ----

    def load(self) -> int:
        """
        Rehydrate from the key-value store.

        Missing blob -> empty list. Malformed blob -> logged, empty list.
        """
        try:
            blob = self._kv.get(self._key)
        except Exception:
            logger.exception("Failed to read tasks from storage key=%s", self._key)
            self._tasks = []
            return 0

        if blob is None:
            self._tasks = []
            logger.info("TaskStore loaded: no stored tasks (key=%s)", self._key)
            return 0

        try:
            tasks = decode_tasks(blob)
        except (TypeError, ValueError):
            logger.exception("Error loading tasks from storage key=%s; starting empty", self._key)
            self._tasks = []
            return 0

        self._tasks = self._dedupe(tasks)
        self._persist()
        logger.info("TaskStore loaded: %d tasks (key=%s)", len(self._tasks), self._key)
        return len(self._tasks)

    @staticmethod
    def _dedupe(tasks: list[Task]) -> list[Task]:
        seen: set[str] = set()
        out: list[Task] = []
        for t in tasks:
            if t.id in seen:
                logger.warning("Dropping duplicate stored task id=%s", t.id)
                continue
            seen.add(t.id)
            out.append(t)
        return out

    def _persist(self) -> None:
        try:
            self._kv.set(self._key, encode_tasks(self._tasks))
        except Exception:
            logger.exception("Failed to write %d tasks to storage key=%s", len(self._tasks), self._key)

    # ---- read API ----

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def find(self, prefix: str) -> Task | None:
        """Exact id, else the single task whose id starts with `prefix`."""
        prefix = (prefix or "").strip()
        if not prefix:
            return None
        exact = self.get(prefix)
        if exact is not None:
            return exact
        matches = [t for t in self._tasks if t.id.startswith(prefix)]
        return matches[0] if len(matches) == 1 else None

    # ---- mutations ----

    def add(
        self,
        *,
        title: str,
        description: str = "",
        priority: Priority | str = Priority.MEDIUM,
        due_date: datetime | None = None,
        reminder_date: datetime | None = None,
        completed: bool = False,
    ) -> Task:
        if not title or not title.strip():
            raise ValueError("title is required")

        task_id = self._new_id()
        while self.get(task_id) is not None:
            task_id = self._new_id()

        task = Task(
            id=task_id,
            title=title.strip(),
            description=(description or "").strip(),
            due_date=ensure_aware(due_date),
            priority=Priority.parse(priority),
            completed=bool(completed),
            reminder_date=ensure_aware(reminder_date),
            created_at=self._clock.now(),
        )
        self._tasks.insert(0, task)
        self._persist()
        logger.debug(
            "Task added id=%s priority=%s due=%s reminder=%s",
            task.id,
            task.priority.value,
            task.due_date,
            task.reminder_date,
        )
        return task

    def update(self, task_id: str, **changes: Any) -> Task | None:
        """
        Merge `changes` into the task with `task_id`.

        Returns the updated task, or None if no task has that id.
        """
        bad = set(changes) - MUTABLE_FIELDS
        if bad:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(bad))}")

        clean = self._normalize_changes(changes)

        for i, t in enumerate(self._tasks):
            if t.id != task_id:
                continue
            updated = replace(t, **clean)
            self._tasks[i] = updated
            self._persist()
            logger.debug("Task updated id=%s fields=%s", task_id, sorted(clean))
            return updated

        self._persist()
        logger.debug("update: unknown task id=%s (no-op)", task_id)
        return None

    @staticmethod
    def _normalize_changes(changes: dict[str, Any]) -> dict[str, Any]:
        clean = dict(changes)
        if "title" in clean:
            title = clean["title"]
            if not title or not str(title).strip():
                raise ValueError("title is required")
            clean["title"] = str(title).strip()
        if "description" in clean:
            clean["description"] = str(clean["description"] or "").strip()
        if "priority" in clean:
            clean["priority"] = Priority.parse(clean["priority"])
        if "completed" in clean:
            clean["completed"] = bool(clean["completed"])
        for name in ("due_date", "reminder_date"):
            if name in clean:
                clean[name] = ensure_aware(clean[name])
        return clean

    def delete(self, task_id: str) -> bool:
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t.id != task_id]
        removed = len(self._tasks) != before
        self._persist()
        if removed:
            logger.debug("Task deleted id=%s", task_id)
        else:
            logger.debug("delete: unknown task id=%s (no-op)", task_id)
        return removed
