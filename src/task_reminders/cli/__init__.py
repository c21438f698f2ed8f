# src/task_reminders/cli/__init__.py
