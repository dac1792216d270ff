# src/taskdeck/tasks/task_codec.py

from __future__ import annotations

"""
JSON codec for the persisted task list.

Layout: one JSON array, one object per task, camelCase keys:
  id, title, description, dueDate, priority, completed, reminderDate, createdAt

Timestamps are ISO 8601 in UTC with a trailing "Z"; null means "no date".
"""

import json
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from .task_models import Priority, Task


class TaskDecodeError(ValueError):
    """Stored blob could not be turned back into tasks."""


def encode_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def decode_timestamp(raw: Any) -> datetime | None:
    if raw is None:
        return None
    if not isinstance(raw, str) or not raw.strip():
        raise TaskDecodeError(f"Invalid timestamp: {raw!r}")
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError as e:
        raise TaskDecodeError(f"Invalid timestamp: {raw!r}") from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "dueDate": encode_timestamp(task.due_date),
        "priority": task.priority.value,
        "completed": task.completed,
        "reminderDate": encode_timestamp(task.reminder_date),
        "createdAt": encode_timestamp(task.created_at),
    }


def record_to_task(record: Any) -> Task:
    if not isinstance(record, dict):
        raise TaskDecodeError(f"Task record must be an object, got {type(record).__name__}")

    try:
        task_id = record["id"]
        title = record["title"]
        raw_priority = record["priority"]
        raw_created = record["createdAt"]
    except KeyError as e:
        raise TaskDecodeError(f"Task record is missing {e.args[0]!r}") from None

    if not isinstance(task_id, str) or not task_id:
        raise TaskDecodeError(f"Invalid task id: {task_id!r}")

    try:
        priority = Priority(raw_priority)
    except ValueError:
        raise TaskDecodeError(f"Invalid priority: {raw_priority!r}") from None

    completed = record.get("completed", False)
    if not isinstance(completed, bool):
        raise TaskDecodeError(f"Invalid completed flag: {completed!r}")

    created_at = decode_timestamp(raw_created)
    if created_at is None:
        raise TaskDecodeError(f"Task {task_id} has no createdAt")

    return Task(
        id=task_id,
        title=str(title),
        description=str(record.get("description") or ""),
        due_date=decode_timestamp(record.get("dueDate")),
        priority=priority,
        completed=completed,
        reminder_date=decode_timestamp(record.get("reminderDate")),
        created_at=created_at,
    )


def encode_tasks(tasks: Iterable[Task]) -> str:
    return json.dumps([task_to_record(t) for t in tasks], ensure_ascii=False)


def decode_tasks(blob: str) -> list[Task]:
    try:
        data = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise TaskDecodeError(f"Stored tasks are not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise TaskDecodeError(f"Stored tasks must be a list, got {type(data).__name__}")

    return [record_to_task(r) for r in data]
