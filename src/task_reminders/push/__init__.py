# src/task_reminders/push/__init__.py
