# src/task_reminders/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .ports import DocumentStore, PushGateway


@dataclass
class AppContext:
    """
    Process-wide context built once by the bootstrap and passed explicitly.

    The reminder engine never sees it.
    """

    settings: Any
    store: DocumentStore
    gateway: PushGateway
