# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Keep the service-account JSON in .env or in the scheduler's environment.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "REMIND_APP_NAME": "App display name (default: task-reminders).",
    "REMIND_LOG_LEVEL": "Console logging level (default: INFO).",
    "REMIND_DATA_DIR": "Local data directory for logs and the SQLite store (default: .local/task_reminders).",
    # Backends
    "REMIND_STORE_BACKEND": "firestore | sqlite (default: firestore).",
    "REMIND_SQLITE_PATH": "SQLite document store path (default: <data_dir>/documents.sqlite3).",
    "REMIND_PUSH_BACKEND": "fcm | log (default: fcm). 'log' only writes messages to the log.",
    "GOOGLE_SERVICE_ACCOUNT": "Service-account JSON blob (required for firestore or fcm).",
    # Reminder windows
    "REMIND_LEAD_MINUTES": "Minutes before the due date at which the due-soon window ends (default: 15).",
    "REMIND_WINDOW_MINUTES": "Width of the due-soon window in minutes (default: 15).",
    "REMIND_STALE_CUTOFF_MINUTES": "Overdue tasks older than this are never notified (default: 1440).",
    # Tuning
    "REMIND_MAX_CONCURRENT_USERS": "Users processed in parallel (default: 8).",
    "REMIND_DISPATCH_TIMEOUT_SECONDS": "Per-token push timeout (default: 15).",
    "REMIND_NOTIFICATION_LINK": "Optional URL opened when a web-push notification is clicked.",
}
