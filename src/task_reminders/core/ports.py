# src/task_reminders/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the reminder pipeline.

The orchestrator and adapters depend on Protocols instead of concrete clients.
This keeps Firestore/FCM swappable with the local SQLite store, the logging
gateway, and the in-memory fakes used in tests.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Protocol

Document = dict[str, Any]


@dataclass(slots=True, frozen=True)
class PushMessage:
    token: str
    title: str
    body: str
    link: str | None = None  # web-push click-through target


class DocumentStore(Protocol):
    """
    Hierarchical document store addressed by slash-separated paths.

    Document paths have an even number of segments ("tasks/u1"),
    collection paths an odd number ("users/u1/devices").
    """

    def get_document(self, path: str) -> Document | None: ...

    def list_documents(self, collection: str) -> list[tuple[str, Document]]: ...

    def set_document(self, path: str, data: Document, *, merge: bool = True) -> None: ...

    def set_documents(self, items: Iterable[tuple[str, Document]], *, merge: bool = True) -> None:
        """Write several documents in one atomic batch."""
        ...


class PushGateway(Protocol):
    """
    Token-based push transport.

    send() returns once the gateway accepted the message and raises on rejection.
    It is blocking; callers move it off the event loop.
    """

    def send(self, message: PushMessage) -> None: ...
