# src/taskdeck/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage/notification/time sources swappable and makes testing easier.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

IdFactory = Callable[[], str]
# Produces a fresh identifier, unique within the process lifetime.


class KeyValueStore(Protocol):
    """Local durable key-value store. Treated as synchronous and always available."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class NotificationSink(Protocol):
    """Fires a user-visible alert. Delivery is not confirmed."""

    def notify(self, title: str, body: str) -> None: ...


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in the local timezone (always timezone-aware)."""

    def now(self) -> datetime:
        return datetime.now().astimezone()
