# src/taskdeck/notify/sinks.py

from __future__ import annotations

"""
Notification sinks.

- DesktopNotificationSink: native OS notification (notify-send / osascript)
- ConsoleNotificationSink: in-app fallback, always available
- FallbackNotifier: picks one of them at call time
"""

import logging
import shutil
import subprocess
import sys
from collections.abc import Callable
from datetime import datetime

from ..core.ports import NotificationSink

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class DesktopNotificationSink:
    """
    Native desktop notifications.

    Available only when enabled in settings and the platform helper
    (`notify-send` on Linux, `osascript` on macOS) is on PATH.
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        app_name: str = "taskdeck",
        timeout_seconds: float = 5.0,
        platform: str | None = None,
    ) -> None:
        self.enabled = enabled
        self.app_name = app_name
        self.timeout_seconds = timeout_seconds
        self._platform = platform or sys.platform

    def _command(self, title: str, body: str) -> list[str] | None:
        if self._platform.startswith("linux"):
            exe = shutil.which("notify-send")
            if exe is None:
                return None
            return [exe, "--app-name", self.app_name, title, body]

        if self._platform == "darwin":
            exe = shutil.which("osascript")
            if exe is None:
                return None
            script = f"display notification {_applescript_quote(body)} with title {_applescript_quote(title)}"
            return [exe, "-e", script]

        return None

    def is_available(self) -> bool:
        return self.enabled and self._command("", "") is not None

    def notify(self, title: str, body: str) -> None:
        cmd = self._command(title, body)
        if cmd is None:
            raise RuntimeError(f"Desktop notifications are not supported on {self._platform}")
        subprocess.run(cmd, check=True, capture_output=True, timeout=self.timeout_seconds)
        logger.debug("Desktop notification sent: %s", title)


class ConsoleNotificationSink:
    """In-app fallback: prints a toast-like line to the console."""

    def __init__(self, printer: Callable[[str], None] | None = None) -> None:
        self._print = printer or (lambda line: print(line, flush=True))

    def is_available(self) -> bool:
        return True

    def notify(self, title: str, body: str) -> None:
        logger.info("Reminder: %s", title)
        self._print(f"[{_ts_local()}] {title} - {body}")


class FallbackNotifier:
    """
    Uses `primary` when it reports itself available, otherwise `fallback`.

    The check runs on every call, so enabling/disabling the desktop path at
    runtime takes effect immediately. A failing primary also falls back.
    """

    def __init__(self, primary: NotificationSink, fallback: NotificationSink) -> None:
        self.primary = primary
        self.fallback = fallback

    def _primary_available(self) -> bool:
        check = getattr(self.primary, "is_available", None)
        if check is None:
            return True
        try:
            return bool(check())
        except Exception:
            logger.debug("Notification capability check failed.", exc_info=True)
            return False

    def notify(self, title: str, body: str) -> None:
        if self._primary_available():
            try:
                self.primary.notify(title, body)
                return
            except Exception:
                logger.warning("Primary notification failed; using fallback.", exc_info=True)
        self.fallback.notify(title, body)
