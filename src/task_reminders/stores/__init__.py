# src/task_reminders/stores/__init__.py
