# src/taskdeck/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime

from ..cli.commands import quick_add
from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.reminder_poller import ReminderPoller

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


async def _read_line(prompt: str) -> str:
    """
    Read one line of stdin without blocking the event loop.

    input() runs in a daemon thread, not the default executor: a reader
    stuck at the prompt must not keep asyncio.run() from shutting down
    on Ctrl+C.
    """
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[str] = loop.create_future()

    def _deliver(line: str | None, exc: BaseException | None) -> None:
        if fut.done():
            return
        if exc is not None:
            fut.set_exception(exc)
        else:
            fut.set_result(line or "")

    def _reader() -> None:
        try:
            line, exc = input(prompt), None
        except Exception as e:  # EOFError, OSError on a closed stdin
            line, exc = None, e
        try:
            loop.call_soon_threadsafe(_deliver, line, exc)
        except RuntimeError:
            # Loop already closed (the console was interrupted).
            pass

    threading.Thread(target=_reader, name="console-stdin", daemon=True).start()
    return await fut


def handle_line(state: AppState, line: str) -> str | None:
    """Run one console line. Returns the reply text (None for blank input)."""
    line = line.strip()
    if not line:
        return None

    try:
        if not line.startswith("/"):
            # Bare text is the task title, taken as typed.
            return quick_add(state, line, emit=_print_ts)
        return command_registry.handle(state, line, emit=_print_ts)
    except ValueError as e:
        return f"{e}."
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."


async def run_console(state: AppState) -> None:
    """
    Interactive console loop.

    The reminder poller shares this event loop, so store mutations and
    reminder ticks never interleave mid-operation. Ctrl+C cancels this
    coroutine; the poller is stopped on the way out.
    """
    interval = float(getattr(state.settings, "reminder_interval_seconds", 60.0))
    poller = ReminderPoller(
        lambda: state.store.tasks,
        state.notifier,
        clock=state.clock,
        interval_seconds=interval,
    )

    logger.info("Console connector started (%d tasks).", len(state.store))
    _print_ts("[CONSOLE] Type a task title to add it. Use /help for commands. Use /exit to quit.\n")

    try:
        async with poller:
            while True:
                try:
                    user_input = (await _read_line(">>> ")).strip()
                except EOFError:
                    logger.info("Console EOF received, exiting.")
                    break

                if user_input.lower() in ("/exit", "/quit"):
                    logger.info("Console exit command received.")
                    break

                reply = handle_line(state, user_input)
                if reply is not None:
                    _print_ts(reply)
    finally:
        logger.info("Console connector finished.")
