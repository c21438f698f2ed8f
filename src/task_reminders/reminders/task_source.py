# src/task_reminders/reminders/task_source.py

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from ..core.ports import DocumentStore
from .reminder_models import Task

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
TASKS_COLLECTION = "tasks"


class TaskLayout(Protocol):
    """One storage shape for a user's task list."""

    name: str

    def load(self, store: DocumentStore, user_id: str) -> list[Task]: ...

    def save(self, store: DocumentStore, user_id: str, tasks: Sequence[Task]) -> None: ...


class AggregateDocumentLayout:
    """tasks/{uid} holds every task in its "list" field."""

    name = "aggregate"

    @staticmethod
    def path(user_id: str) -> str:
        return f"{TASKS_COLLECTION}/{user_id}"

    def load(self, store: DocumentStore, user_id: str) -> list[Task]:
        doc = store.get_document(self.path(user_id))
        if not doc:
            return []
        items = doc.get("list")
        if not isinstance(items, list):
            return []
        return [Task.from_document(item, fallback_id=str(i)) for i, item in enumerate(items)]

    def save(self, store: DocumentStore, user_id: str, tasks: Sequence[Task]) -> None:
        # Lists cannot be merged element-wise: the whole list is rewritten,
        # sibling fields on the document are left alone.
        store.set_document(
            self.path(user_id),
            {"list": [t.to_document() for t in tasks]},
            merge=True,
        )


class PerTaskDocumentLayout:
    """users/{uid}/tasks/{taskId}, one document per task."""

    name = "per_task"

    @staticmethod
    def collection(user_id: str) -> str:
        return f"{USERS_COLLECTION}/{user_id}/{TASKS_COLLECTION}"

    def load(self, store: DocumentStore, user_id: str) -> list[Task]:
        return [
            Task.from_document(data, doc_id=doc_id)
            for doc_id, data in store.list_documents(self.collection(user_id))
        ]

    def save(self, store: DocumentStore, user_id: str, tasks: Sequence[Task]) -> None:
        coll = self.collection(user_id)
        store.set_documents(
            [(f"{coll}/{t.doc_id or t.id}", {"reminders": t.reminders_to_db()}) for t in tasks],
            merge=True,
        )


DEFAULT_LAYOUTS: tuple[TaskLayout, ...] = (AggregateDocumentLayout(), PerTaskDocumentLayout())


@dataclass(slots=True)
class UserTasks:
    user_id: str
    tasks: list[Task]
    layout: TaskLayout | None


class TaskSource:
    """
    Reads users, their tasks and their device tokens from a DocumentStore.

    Task layouts are tried in priority order; the first that yields tasks wins,
    and write-back goes through that same layout.
    """

    def __init__(self, store: DocumentStore, layouts: Sequence[TaskLayout] = DEFAULT_LAYOUTS) -> None:
        self._store = store
        self._layouts = tuple(layouts)

    def list_user_ids(self) -> list[str]:
        return [doc_id for doc_id, _ in self._store.list_documents(USERS_COLLECTION)]

    def load_user_tasks(self, user_id: str) -> UserTasks:
        for layout in self._layouts:
            tasks = layout.load(self._store, user_id)
            if tasks:
                logger.debug("user=%s tasks=%d layout=%s", user_id, len(tasks), layout.name)
                return UserTasks(user_id=user_id, tasks=tasks, layout=layout)
        return UserTasks(user_id=user_id, tasks=[], layout=None)

    def load_tasks(self, user_id: str) -> list[Task]:
        return self.load_user_tasks(user_id).tasks

    def save_tasks(self, user_tasks: UserTasks) -> None:
        if user_tasks.layout is None or not user_tasks.tasks:
            return
        user_tasks.layout.save(self._store, user_tasks.user_id, user_tasks.tasks)

    def load_tokens(self, user_id: str) -> list[str]:
        """Device tokens from users/{uid}/devices, deduplicated in first-seen order."""
        tokens: list[str] = []
        seen: set[str] = set()
        for _doc_id, data in self._store.list_documents(f"{USERS_COLLECTION}/{user_id}/devices"):
            token = data.get("token") if isinstance(data, dict) else None
            if not isinstance(token, str) or not token.strip():
                continue
            token = token.strip()
            if token in seen:
                continue
            seen.add(token)
            tokens.append(token)
        return tokens

    def display_name(self, user_id: str) -> str:
        doc = self._store.get_document(f"{USERS_COLLECTION}/{user_id}") or {}
        return str(doc.get("displayName") or "(unknown)")
