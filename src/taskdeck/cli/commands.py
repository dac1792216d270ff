# src/taskdeck/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable
from datetime import datetime
from typing import Any, cast

from ..core.state import AppState
from ..tasks.task_models import Task, TaskFilter, TaskSort, ensure_aware
from ..tasks.task_view import TaskFlags, TaskRow, annotate

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

FILTER_TITLES = {
    TaskFilter.ALL: "All Tasks",
    TaskFilter.ACTIVE: "Active Tasks",
    TaskFilter.COMPLETED: "Completed Tasks",
    TaskFilter.OVERDUE: "Overdue Tasks",
}

# Console option name -> TaskStore field name.
OPTION_FIELDS = {
    "title": "title",
    "desc": "description",
    "description": "description",
    "priority": "priority",
    "due": "due_date",
    "remind": "reminder_date",
    "reminder": "reminder_date",
}
DATE_FIELDS = {"due_date", "reminder_date"}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Cannot parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ValueError as e:
            return f"{e}. Use /help for usage."

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting ----


def format_date(value: datetime) -> str:
    """Oct 19, 2026"""
    local = value.astimezone()
    return f"{local:%b} {local.day}, {local.year}"


def format_time(value: datetime) -> str:
    """9:05 AM"""
    local = value.astimezone()
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{local.hour % 12 or 12}:{local.minute:02d} {suffix}"


def _format_when(value: datetime) -> str:
    return f"{format_date(value)} {format_time(value)}"


def render_row(row: TaskRow) -> str:
    task, flags = row.task, row.flags
    parts = [
        "[x]" if task.completed else "[ ]",
        task.id[:8],
        task.priority.value.upper().ljust(6),
        task.title,
    ]
    if task.due_date is not None:
        parts.append(f"(due {_format_when(task.due_date)})")
    badges = []
    if flags.overdue:
        badges.append("OVERDUE")
    if flags.due_today:
        badges.append("TODAY")
    if flags.reminder_due:
        badges.append("REMINDER")
    if badges:
        parts.append(" ".join(badges))
    return "  ".join(parts)


def render_task(task: Task) -> str:
    lines = [
        f"Task {task.id}",
        f"  Title: {task.title}",
        f"  Description: {task.description or '-'}",
        f"  Priority: {task.priority.value}",
        f"  Completed: {'yes' if task.completed else 'no'}",
        f"  Due: {_format_when(task.due_date) if task.due_date else '-'}",
        f"  Reminder: {_format_when(task.reminder_date) if task.reminder_date else '-'}",
        f"  Created: {_format_when(task.created_at)}",
    ]
    return "\n".join(lines)


# ---- argument helpers ----


def parse_when(raw: str) -> datetime | None:
    """ISO date/datetime in local time; 'none' or '-' clears."""
    text = raw.strip()
    if text.lower() in ("", "none", "-", "null"):
        return None
    try:
        value = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid date {raw!r} (expected YYYY-MM-DD or 'YYYY-MM-DD HH:MM')") from None
    return ensure_aware(value)


def split_options(args: list[str]) -> tuple[list[str], dict[str, Any]]:
    """Split `key=value` options (known keys only) from positional words."""
    words: list[str] = []
    fields: dict[str, Any] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        field_name = OPTION_FIELDS.get(key.lower()) if sep else None
        if field_name is None:
            words.append(arg)
            continue
        fields[field_name] = parse_when(value) if field_name in DATE_FIELDS else value
    return words, fields


def _resolve(state: AppState, args: list[str]) -> Task:
    if not args:
        raise ValueError("Task id is required")
    task = state.store.find(args[0])
    if task is None:
        raise ValueError(f"No single task matches id {args[0]!r}")
    return task


def _flags(state: AppState, task: Task) -> TaskFlags:
    return annotate(task, state.clock.now())


def _emit(emit: CommandEmitter | None, text: str) -> None:
    if emit is None:
        return
    try:
        emit(text)
    except Exception:
        logger.debug("emit failed", exc_info=True)


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <title words> [desc=...] [priority=low|medium|high] [due=...] [remind=...]
    """
    words, fields = split_options(args)
    if words and "title" not in fields:
        fields["title"] = " ".join(words)
    return _create(state, fields, emit)


def quick_add(state: AppState, text: str, emit: CommandEmitter | None = None) -> str:
    """Add a task titled with `text` verbatim (no quoting or options)."""
    return _create(state, {"title": text}, emit)


def _create(state: AppState, fields: dict[str, Any], emit: CommandEmitter | None) -> str:
    if not str(fields.get("title") or "").strip():
        raise ValueError("Title is required")
    task = state.store.add(**fields)
    _emit(emit, "Task Created: Your new task has been created successfully.")
    return render_row(TaskRow(task=task, flags=_flags(state, task)))


def cmd_edit(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /edit <id> [title=...] [desc=...] [priority=...] [due=...|none] [remind=...|none]
    """
    task = _resolve(state, args)
    _, fields = split_options(args[1:])
    if not fields:
        raise ValueError("Nothing to change")
    updated = state.store.update(task.id, **fields)
    if updated is None:
        return f"Task {task.id[:8]} no longer exists."
    _emit(emit, "Task Updated: Your task has been successfully updated.")
    return render_row(TaskRow(task=updated, flags=_flags(state, updated)))


def _set_completed(state: AppState, args: list[str], completed: bool) -> str:
    task = _resolve(state, args)
    state.store.update(task.id, completed=completed)
    if completed:
        return "Task Completed: Great job! Task marked as completed."
    return "Task Reopened: Task has been reopened."


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, True)


def cmd_undo(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, False)


def cmd_delete(state: AppState, args: list[str]) -> str:
    task = _resolve(state, args)
    state.store.delete(task.id)
    return "Task Deleted: The task has been permanently deleted."


def cmd_show(state: AppState, args: list[str]) -> str:
    return render_task(_resolve(state, args))


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list                 -> current filter + sort
    /list <filter> [sort] -> change selection, then list
    """
    if args:
        state.view.set_filter(args[0])
    if len(args) > 1:
        state.view.set_sort(args[1])

    rows = state.view.visible()
    header = f"{FILTER_TITLES[state.view.filter_mode]} ({len(rows)}), sorted by {state.view.sort_mode.value}"
    if not rows:
        return f"{header}\n  (no tasks)"
    return "\n".join([header, *("  " + render_row(r) for r in rows)])


def cmd_filter(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Filter: {state.view.filter_mode.value}. Options: {', '.join(f.value for f in TaskFilter)}."
    mode = state.view.set_filter(args[0])
    return f"Filter set to {mode.value}."


def cmd_sort(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Sort: {state.view.sort_mode.value}. Options: {', '.join(s.value for s in TaskSort)}."
    mode = state.view.set_sort(args[0])
    return f"Sort set to {mode.value}."


def cmd_counts(state: AppState, args: list[str]) -> str:
    counts = state.view.counts()
    return (
        f"All Tasks: {counts.all}\n"
        f"Active: {counts.active}\n"
        f"Completed: {counts.completed}\n"
        f"Overdue: {counts.overdue}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    help_text="Create a task: /add <title> [desc=] [priority=] [due=] [remind=].",
    aliases=["new"],
)
registry.register(
    "edit",
    cmd_edit,
    help_text="Edit a task: /edit <id> [title=] [desc=] [priority=] [due=|none] [remind=|none].",
)
registry.register("done", cmd_done, help_text="Mark a task as completed: /done <id>.")
registry.register("undo", cmd_undo, help_text="Reopen a completed task: /undo <id>.")
registry.register("delete", cmd_delete, help_text="Delete a task permanently: /delete <id>.", aliases=["rm"])
registry.register("show", cmd_show, help_text="Show task details: /show <id>.")
registry.register("list", cmd_list, help_text="List tasks: /list [all|active|completed|overdue] [dueDate|priority|created].", aliases=["ls"])
registry.register("filter", cmd_filter, help_text="Set filter: /filter all|active|completed|overdue.")
registry.register("sort", cmd_sort, help_text="Set sort: /sort dueDate|priority|created.")
registry.register("counts", cmd_counts, help_text="Show task counts per filter.")
