"""taskdeck: a personal task manager with local persistence and reminders."""

__version__ = "0.1.0"
