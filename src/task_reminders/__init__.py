"""Due-date push reminders for per-user task lists."""

__version__ = "0.1.0"
