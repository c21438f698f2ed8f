# src/task_reminders/stores/sqlite_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ..core.ports import Document

logger = logging.getLogger(__name__)


def split_path(path: str) -> tuple[str, str]:
    """
    "users/u1/devices/d1" -> ("users/u1/devices", "d1").

    Raises ValueError for collection paths (odd number of segments).
    """
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts or len(parts) % 2 != 0:
        raise ValueError(f"not a document path: {path!r}")
    return "/".join(parts[:-1]), parts[-1]


def _normalize_collection(collection: str) -> str:
    parts = [p for p in collection.strip("/").split("/") if p]
    if not parts or len(parts) % 2 != 1:
        raise ValueError(f"not a collection path: {collection!r}")
    return "/".join(parts)


def merge_fields(base: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Field-level merge: nested maps merge, everything else (lists included) is replaced."""
    out = dict(base)
    for key, value in patch.items():
        current = out.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            out[key] = merge_fields(current, value)
        else:
            out[key] = value
    return out


class SQLiteDocumentStore:
    """
    SQLite-backed document store for local runs and tests.

    Documents are JSON blobs keyed by their full path, with the parent collection
    indexed so a collection can be listed.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "documents.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SQLiteDocumentStore ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    path TEXT PRIMARY KEY,
                    collection TEXT NOT NULL,
                    doc_id TEXT NOT NULL,
                    data TEXT NOT NULL DEFAULT '{}',
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_documents_collection ON documents(collection)")
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _decode(s: str | None) -> Document:
        if not s:
            return {}
        val = json.loads(s)
        return val if isinstance(val, dict) else {}

    @staticmethod
    def _encode(data: Document) -> str:
        return json.dumps(data, ensure_ascii=False, default=str)

    def _write(self, conn: sqlite3.Connection, path: str, data: Document, merge: bool) -> None:
        collection, doc_id = split_path(path)
        full = f"{collection}/{doc_id}"
        if merge:
            row = conn.execute("SELECT data FROM documents WHERE path = ?", (full,)).fetchone()
            if row is not None:
                data = merge_fields(self._decode(row["data"]), data)
        conn.execute(
            """
            INSERT INTO documents(path, collection, doc_id, data, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(path) DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at
            """,
            (full, collection, doc_id, self._encode(data), time.time()),
        )

    # ---- public API ----

    def get_document(self, path: str) -> Document | None:
        collection, doc_id = split_path(path)
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT data FROM documents WHERE path = ?", (f"{collection}/{doc_id}",)
            ).fetchone()
            return self._decode(row["data"]) if row else None
        finally:
            conn.close()

    def list_documents(self, collection: str) -> list[tuple[str, Document]]:
        coll = _normalize_collection(collection)
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT doc_id, data FROM documents WHERE collection = ? ORDER BY doc_id ASC",
                (coll,),
            ).fetchall()
            return [(str(r["doc_id"]), self._decode(r["data"])) for r in rows]
        finally:
            conn.close()

    def set_document(self, path: str, data: Document, *, merge: bool = True) -> None:
        self.set_documents([(path, data)], merge=merge)

    def set_documents(self, items: Iterable[tuple[str, Document]], *, merge: bool = True) -> None:
        conn = self._get_conn()
        try:
            for path, data in items:
                self._write(conn, path, data, merge)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
