# src/task_reminders/reminders/reminder_models.py

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class TaskDataError(ValueError):
    """Stored task data cannot be interpreted (bad entry shape, bad due date)."""


class ReminderStatus(StrEnum):
    """
    Terminal states of a reminder window for one due date.

    A record without a status (or with an unknown one) has never been handled.
    """

    SENT = "sent"
    MISSED = "missed"
    SKIPPED_COMPLETED = "skipped-completed"

    @classmethod
    def from_db(cls, raw: Any) -> ReminderStatus | None:
        if not raw:
            return None
        try:
            return cls(str(raw))
        except ValueError:
            return None


class IntentKind(StrEnum):
    DUE_SOON = "due-soon"
    MISSED = "missed"


_TRUE_STRINGS = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_STRINGS = frozenset({"", "0", "false", "no", "n", "off"})


def parse_flag(raw: Any) -> bool:
    """Stored booleans, plus the string spellings older clients wrote ("false" is False)."""
    if raw is None:
        return False
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    if isinstance(raw, str):
        s = raw.strip().lower()
        if s in _TRUE_STRINGS:
            return True
        if s in _FALSE_STRINGS:
            return False
    raise TaskDataError(f"invalid boolean: {raw!r}")


def canonical_instant(value: str | datetime) -> str:
    """
    Normalize a timestamp to UTC, millisecond precision, "Z" suffix.

    Naive values are taken as UTC. Strings must be ISO-8601.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        raw = value.strip()
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError as exc:
            raise TaskDataError(f"invalid ISO-8601 timestamp: {value!r}") from exc
    else:
        raise TaskDataError(f"unsupported timestamp type: {type(value).__name__}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    dt = dt.astimezone(UTC)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_instant(value: str | datetime) -> datetime:
    """Parse a timestamp into an aware UTC datetime (millisecond precision)."""
    return datetime.fromisoformat(canonical_instant(value))


@dataclass(slots=True, frozen=True)
class ReminderRecord:
    status: ReminderStatus | None
    for_due_date: str | None
    at: str | None = None

    @classmethod
    def from_db(cls, raw: Any) -> ReminderRecord | None:
        # Earlier notifier versions stored a bare `true` per window.
        if raw is True:
            return cls(status=ReminderStatus.SENT, for_due_date=None)
        if not isinstance(raw, dict):
            return None
        for_due = raw.get("forDueDate")
        return cls(
            status=ReminderStatus.from_db(raw.get("status")),
            for_due_date=str(for_due) if for_due else None,
            at=str(raw["at"]) if raw.get("at") else None,
        )

    def to_db(self) -> dict[str, Any]:
        return {
            "status": self.status.value if self.status else None,
            "at": self.at,
            "forDueDate": self.for_due_date,
        }


@dataclass(slots=True)
class Task:
    id: str
    text: str
    due_date: str | datetime | None
    completed: bool
    reminders: dict[str, ReminderRecord] = field(default_factory=dict)

    # Full stored document; fields this package does not own are written back untouched.
    raw: dict[str, Any] = field(default_factory=dict)
    doc_id: str | None = None  # set when each task lives in its own document

    @classmethod
    def from_document(
        cls,
        data: Any,
        *,
        fallback_id: str | None = None,
        doc_id: str | None = None,
    ) -> Task:
        if not isinstance(data, dict):
            raise TaskDataError(f"task entry must be a mapping, got {type(data).__name__}")

        task_id = data.get("id")
        if task_id is None or task_id == "":
            task_id = doc_id if doc_id is not None else fallback_id

        reminders: dict[str, ReminderRecord] = {}
        raw_reminders = data.get("reminders")
        if isinstance(raw_reminders, dict):
            for key, value in raw_reminders.items():
                rec = ReminderRecord.from_db(value)
                if rec is not None:
                    reminders[str(key)] = rec

        due = data.get("dueDate")
        return cls(
            id="" if task_id is None else str(task_id),
            text=str(data.get("text") or ""),
            due_date=due if due else None,
            completed=parse_flag(data.get("completed")),
            reminders=reminders,
            raw=copy.deepcopy(data),
            doc_id=doc_id,
        )

    def set_reminder(self, window: str, record: ReminderRecord) -> None:
        self.reminders[window] = record

    def reminders_to_db(self) -> dict[str, Any]:
        """
        Stored form of the reminders map.

        Only windows whose record changed are re-encoded; everything else is
        carried over from the original document as stored.
        """
        original = self.raw.get("reminders")
        if not isinstance(original, dict):
            original = {}
        out: dict[str, Any] = dict(original)
        for key, rec in self.reminders.items():
            if key in original and ReminderRecord.from_db(original[key]) == rec:
                continue
            out[key] = rec.to_db()
        return out

    def to_document(self) -> dict[str, Any]:
        doc = copy.deepcopy(self.raw)
        doc["reminders"] = self.reminders_to_db()
        return doc


@dataclass(slots=True, frozen=True)
class NotificationIntent:
    """What the engine wants delivered; the dispatcher decides how."""

    window: str
    kind: IntentKind
    task_id: str
    title: str
    body: str
    minutes_left: int


@dataclass(slots=True, frozen=True)
class Evaluation:
    window: str
    record: ReminderRecord | None  # None: leave the stored record as is
    intents: list[NotificationIntent] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.record is not None
