# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from task_reminders.core.state import AppContext
from task_reminders.stores.sqlite_store import SQLiteDocumentStore

from .fakes import FakeDocumentStore, FakePushGateway

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap and orchestrator.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="task-reminders-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        store_backend="sqlite",
        sqlite_path=tmp_path / "documents.sqlite3",
        push_backend="log",
        credentials_json=None,
        lead_minutes=15,
        window_minutes=15,
        stale_cutoff_minutes=1440,
        max_concurrent_users=4,
        dispatch_timeout_seconds=2.0,
        notification_link="https://todo.example.com/",
    )


@pytest.fixture()
def store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture()
def gateway() -> FakePushGateway:
    return FakePushGateway()


@pytest.fixture()
def ctx(settings: SimpleNamespace, store: FakeDocumentStore, gateway: FakePushGateway) -> AppContext:
    return AppContext(settings=settings, store=store, gateway=gateway)


@pytest.fixture()
def sqlite_store(tmp_path: Path) -> SQLiteDocumentStore:
    return SQLiteDocumentStore(tmp_path / "documents.sqlite3")
