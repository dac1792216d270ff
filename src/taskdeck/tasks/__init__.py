"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority, TaskFilter, TaskSort)
- task_codec.py: JSON encoding of the stored task list
- task_store.py: owner of the collection, persisted to a key-value store
- task_view.py: filtering, sorting, counts and per-task flags
- reminder_poller.py: polling loop that notifies about due reminders
"""
