# src/task_reminders/reminders/reminder_engine.py

from __future__ import annotations

"""
Reminder engine.

Pure decision logic: given one task and the current instant, decide whether the
task's reminder window needs a "due soon" push, a "missed" push, a silent
resolution, or nothing at all.

A reminder record only counts for the due date it was written for. When a task
is rescheduled the old record is ignored, so the new due date triggers again.

No I/O happens here; the orchestrator owns loading, sending and persisting.
"""

import math
from dataclasses import dataclass
from datetime import UTC, datetime

from .reminder_models import (
    Evaluation,
    IntentKind,
    NotificationIntent,
    ReminderRecord,
    ReminderStatus,
    Task,
    canonical_instant,
    parse_instant,
)

TERMINAL_STATUSES = frozenset(
    {ReminderStatus.SENT, ReminderStatus.MISSED, ReminderStatus.SKIPPED_COMPLETED}
)

DUE_SOON_TITLE = "⏰ Task Reminder"
MISSED_TITLE = "⚠️ Task Missed"


@dataclass(slots=True, frozen=True)
class ReminderPolicy:
    """
    Window configuration.

    The due-soon window is the half-open band (lead - window, lead] of minutes left.
    Anything at or below lead - window is past the window ("missed").
    Tasks overdue by more than stale_cutoff minutes are never notified.
    """

    lead_minutes: int = 15
    window_minutes: int = 15
    stale_cutoff_minutes: int = 1440

    @property
    def window_key(self) -> str:
        return f"{self.lead_minutes}min"


DEFAULT_POLICY = ReminderPolicy()


def minutes_left(due: datetime, now: datetime) -> int:
    """Whole minutes from now until due, truncated toward zero (negative when overdue)."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    seconds = (due - now).total_seconds()
    return math.trunc(seconds / 60)


def _due_soon_body(text: str, mins: int) -> str:
    unit = "minute" if mins == 1 else "minutes"
    return f'Your task "{text}" is due in {mins} {unit}.'


def _missed_body(text: str, due: datetime) -> str:
    return f'Your task "{text}" was due at {due.strftime("%H:%M")} UTC.'


def evaluate(task: Task, now: datetime, policy: ReminderPolicy = DEFAULT_POLICY) -> Evaluation:
    window = policy.window_key
    unchanged = Evaluation(window=window, record=None)

    if task.due_date is None:
        return unchanged

    for_due_date = canonical_instant(task.due_date)

    record = task.reminders.get(window)
    if record is not None and record.for_due_date != for_due_date:
        # Rescheduled since the record was written.
        record = None

    if record is not None and record.status in TERMINAL_STATUSES:
        return unchanged

    due = parse_instant(for_due_date)
    mins = minutes_left(due, now)

    if mins < -policy.stale_cutoff_minutes:
        return unchanged

    if mins > policy.lead_minutes:
        return unchanged

    stamp = canonical_instant(now)

    if task.completed:
        return Evaluation(
            window=window,
            record=ReminderRecord(
                status=ReminderStatus.SKIPPED_COMPLETED, for_due_date=for_due_date, at=stamp
            ),
        )

    if mins > policy.lead_minutes - policy.window_minutes:
        intent = NotificationIntent(
            window=window,
            kind=IntentKind.DUE_SOON,
            task_id=task.id,
            title=DUE_SOON_TITLE,
            body=_due_soon_body(task.text, mins),
            minutes_left=mins,
        )
        return Evaluation(
            window=window,
            record=ReminderRecord(status=ReminderStatus.SENT, for_due_date=for_due_date, at=stamp),
            intents=[intent],
        )

    intent = NotificationIntent(
        window=window,
        kind=IntentKind.MISSED,
        task_id=task.id,
        title=MISSED_TITLE,
        body=_missed_body(task.text, due),
        minutes_left=mins,
    )
    return Evaluation(
        window=window,
        record=ReminderRecord(status=ReminderStatus.MISSED, for_due_date=for_due_date, at=stamp),
        intents=[intent],
    )
