"""
Reminder subsystem.

Components:
- reminder_models.py: data structures (Task, ReminderRecord, NotificationIntent)
- reminder_engine.py: pure due-soon / missed decision logic
- task_source.py: loads users, tasks and device tokens from a DocumentStore
- dispatcher.py: best-effort per-token push delivery
- orchestrator.py: one full scan-and-notify pass
"""
