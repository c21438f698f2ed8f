# src/task_reminders/stores/firestore_store.py

from __future__ import annotations

import logging
from collections.abc import Iterable

import firebase_admin
from firebase_admin import firestore

from ..core.ports import Document

logger = logging.getLogger(__name__)


class FirestoreDocumentStore:
    """DocumentStore over Cloud Firestore (firebase-admin client, blocking calls)."""

    def __init__(self, app: firebase_admin.App) -> None:
        self._db = firestore.client(app=app)
        logger.info("FirestoreDocumentStore ready project=%s", app.project_id)

    def get_document(self, path: str) -> Document | None:
        snap = self._db.document(path).get()
        if not snap.exists:
            return None
        return snap.to_dict() or {}

    def list_documents(self, collection: str) -> list[tuple[str, Document]]:
        return [(snap.id, snap.to_dict() or {}) for snap in self._db.collection(collection).stream()]

    def set_document(self, path: str, data: Document, *, merge: bool = True) -> None:
        self._db.document(path).set(data, merge=merge)

    def set_documents(self, items: Iterable[tuple[str, Document]], *, merge: bool = True) -> None:
        batch = self._db.batch()
        count = 0
        for path, data in items:
            batch.set(self._db.document(path), data, merge=merge)
            count += 1
        if count:
            batch.commit()
            logger.debug("Firestore batch committed writes=%d", count)
