# src/task_reminders/core/__init__.py
