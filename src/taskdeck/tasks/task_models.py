# src/taskdeck/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class Priority(StrEnum):
    """Task priority. Ordered low < medium < high via `rank`."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def parse(cls, raw: str | Priority) -> Priority:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(f"Invalid priority: {raw!r}. Allowed: {allowed}") from None


_PRIORITY_RANK = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}


class TaskFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class TaskSort(StrEnum):
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    CREATED = "created"


# Fields a caller may change after creation (id and created_at are fixed).
MUTABLE_FIELDS = frozenset(
    {"title", "description", "due_date", "priority", "completed", "reminder_date"}
)


def ensure_aware(value: datetime | None) -> datetime | None:
    """Naive datetimes are taken as local time."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.astimezone()
    return value


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str
    due_date: datetime | None
    priority: Priority
    completed: bool
    reminder_date: datetime | None
    created_at: datetime
