# src/task_reminders/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole run (normal "settings layer").
- No secrets required at import time; credentials are read by the bootstrap.
- Reminder windows are configuration, not code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "REMIND"

# Service-account JSON blob used for both Firestore and FCM.
CREDENTIALS_ENV = "GOOGLE_SERVICE_ACCOUNT"

STORE_BACKENDS = ("firestore", "sqlite")
PUSH_BACKENDS = ("fcm", "log")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = _env(name, default).strip().lower()
    return raw if raw in choices else default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Backends ----
    store_backend: str
    sqlite_path: Path
    push_backend: str
    credentials_json: str | None

    # ---- Reminder windows (minutes) ----
    lead_minutes: int
    window_minutes: int
    stale_cutoff_minutes: int

    # ---- Run tuning ----
    max_concurrent_users: int
    dispatch_timeout_seconds: float
    notification_link: str | None

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "task-reminders").strip() or "task-reminders"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/task_reminders"))

        store_backend = _env_choice(_k("STORE_BACKEND"), STORE_BACKENDS, "firestore")
        sqlite_path = _env_path(_k("SQLITE_PATH"), data_dir / "documents.sqlite3")
        push_backend = _env_choice(_k("PUSH_BACKEND"), PUSH_BACKENDS, "fcm")

        credentials_json = _env(CREDENTIALS_ENV).strip() or None

        lead_minutes = max(0, _env_int(_k("LEAD_MINUTES"), 15))
        window_minutes = max(1, _env_int(_k("WINDOW_MINUTES"), 15))
        stale_cutoff_minutes = max(0, _env_int(_k("STALE_CUTOFF_MINUTES"), 1440))

        max_concurrent_users = max(1, _env_int(_k("MAX_CONCURRENT_USERS"), 8))
        dispatch_timeout_seconds = max(0.1, _env_float(_k("DISPATCH_TIMEOUT_SECONDS"), 15.0))
        notification_link = _env(_k("NOTIFICATION_LINK")).strip() or None

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            store_backend=store_backend,
            sqlite_path=sqlite_path,
            push_backend=push_backend,
            credentials_json=credentials_json,
            lead_minutes=lead_minutes,
            window_minutes=window_minutes,
            stale_cutoff_minutes=stale_cutoff_minutes,
            max_concurrent_users=max_concurrent_users,
            dispatch_timeout_seconds=dispatch_timeout_seconds,
            notification_link=notification_link,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
