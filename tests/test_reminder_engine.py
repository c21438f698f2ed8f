# tests/test_reminder_engine.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from task_reminders.reminders.reminder_engine import ReminderPolicy, evaluate, minutes_left
from task_reminders.reminders.reminder_models import (
    IntentKind,
    ReminderRecord,
    ReminderStatus,
    Task,
    TaskDataError,
    canonical_instant,
)

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)


def make_task(
    minutes: float | None,
    *,
    completed: bool = False,
    reminders: dict | None = None,
    text: str = "Pay rent",
) -> Task:
    doc = {
        "id": "t1",
        "text": text,
        "dueDate": None if minutes is None else canonical_instant(NOW + timedelta(minutes=minutes)),
        "completed": completed,
        "reminders": reminders or {},
    }
    return Task.from_document(doc)


def apply(task: Task, now: datetime = NOW, policy: ReminderPolicy = ReminderPolicy()):
    """Evaluate and fold the new record back, like the orchestrator does."""
    result = evaluate(task, now, policy)
    if result.record is not None:
        task.set_reminder(result.window, result.record)
    return result


def test_task_without_due_date_is_ignored() -> None:
    result = evaluate(make_task(None), NOW)
    assert result.record is None
    assert result.intents == []


def test_far_future_task_is_not_yet_eligible() -> None:
    result = evaluate(make_task(16), NOW)
    assert not result.changed
    assert result.intents == []


def test_due_soon_end_to_end_scenario() -> None:
    task = make_task(10)
    result = evaluate(task, NOW)

    assert result.window == "15min"
    assert [i.kind for i in result.intents] == [IntentKind.DUE_SOON]
    assert result.intents[0].task_id == "t1"
    assert result.intents[0].body == 'Your task "Pay rent" is due in 10 minutes.'
    assert result.record is not None
    assert result.record.status == ReminderStatus.SENT
    assert result.record.for_due_date == "2026-10-19T12:10:00.000Z"
    assert result.record.at == "2026-10-19T12:00:00.000Z"


def test_upper_boundary_is_inside_due_soon_window() -> None:
    result = evaluate(make_task(15), NOW)
    assert [i.kind for i in result.intents] == [IntentKind.DUE_SOON]


def test_zero_minutes_left_falls_into_missed_branch() -> None:
    result = evaluate(make_task(0), NOW)
    assert [i.kind for i in result.intents] == [IntentKind.MISSED]
    assert result.record is not None
    assert result.record.status == ReminderStatus.MISSED


def test_one_minute_left_is_still_due_soon() -> None:
    result = evaluate(make_task(1), NOW)
    assert result.intents[0].kind == IntentKind.DUE_SOON
    assert result.intents[0].body.endswith("is due in 1 minute.")


def test_sent_record_for_current_due_date_is_idempotent() -> None:
    task = make_task(10)
    first = apply(task)
    assert len(first.intents) == 1

    second = evaluate(task, NOW)
    assert second.intents == []
    assert second.record is None


def test_at_most_one_intent_across_repeated_runs() -> None:
    task = make_task(14)
    intents = []
    # Every two minutes from 14 minutes before due until two hours after.
    for step in range(0, 67):
        intents.extend(apply(task, NOW + timedelta(minutes=2 * step)).intents)
    assert len(intents) == 1
    assert intents[0].kind == IntentKind.DUE_SOON


def test_missed_is_sent_once_when_due_soon_window_was_never_seen() -> None:
    task = make_task(-20)
    first = apply(task)
    assert [i.kind for i in first.intents] == [IntentKind.MISSED]
    assert first.intents[0].body == 'Your task "Pay rent" was due at 11:40 UTC.'

    assert apply(task, NOW + timedelta(minutes=5)).intents == []


def test_reschedule_resets_stale_record() -> None:
    old_due = canonical_instant(NOW - timedelta(days=1))
    task = make_task(
        10,
        reminders={"15min": {"status": "sent", "at": old_due, "forDueDate": old_due}},
    )
    result = evaluate(task, NOW)
    assert [i.kind for i in result.intents] == [IntentKind.DUE_SOON]
    assert result.record is not None
    assert result.record.for_due_date == canonical_instant(NOW + timedelta(minutes=10))


def test_reschedule_compares_normalized_due_dates() -> None:
    due = NOW + timedelta(minutes=10)
    # Same instant, different spelling: still the same due date.
    task = Task.from_document(
        {
            "id": "t1",
            "text": "Pay rent",
            "dueDate": "2026-10-19T14:10:00+02:00",
            "completed": False,
            "reminders": {"15min": {"status": "sent", "forDueDate": canonical_instant(due)}},
        }
    )
    assert evaluate(task, NOW).intents == []


def test_completed_task_past_window_resolves_silently() -> None:
    result = evaluate(make_task(-20, completed=True), NOW)
    assert result.intents == []
    assert result.record is not None
    assert result.record.status == ReminderStatus.SKIPPED_COMPLETED


def test_completed_task_inside_window_gets_no_due_soon_push() -> None:
    result = evaluate(make_task(5, completed=True), NOW)
    assert result.intents == []
    assert result.record is not None
    assert result.record.status == ReminderStatus.SKIPPED_COMPLETED


def test_completed_task_far_from_due_is_left_alone() -> None:
    # Un-completing it later must still produce a reminder.
    result = evaluate(make_task(120, completed=True), NOW)
    assert result.record is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("false", False), ("False", False), ("0", False), ("", False), (0, False), (None, False),
     ("true", True), ("1", True), (1, True), (True, True)],
)
def test_completed_flag_spellings(raw, expected) -> None:
    task = Task.from_document({"id": "t1", "text": "x", "completed": raw})
    assert task.completed is expected


def test_completed_string_false_still_gets_pushed() -> None:
    due = canonical_instant(NOW + timedelta(minutes=5))
    task = Task.from_document({"id": "t1", "text": "Pay rent", "dueDate": due, "completed": "false"})
    result = evaluate(task, NOW)
    assert [i.kind for i in result.intents] == [IntentKind.DUE_SOON]
    assert result.record.status == ReminderStatus.SENT


def test_unreadable_completed_flag_raises() -> None:
    with pytest.raises(TaskDataError):
        Task.from_document({"id": "t1", "text": "x", "completed": "maybe"})


def test_stale_cutoff_skips_ancient_tasks() -> None:
    result = evaluate(make_task(-2000), NOW)
    assert result.intents == []
    assert result.record is None


def test_stale_cutoff_boundary_is_inclusive() -> None:
    result = evaluate(make_task(-1440), NOW)
    assert [i.kind for i in result.intents] == [IntentKind.MISSED]


def test_custom_policy_moves_the_window() -> None:
    policy = ReminderPolicy(lead_minutes=30, window_minutes=10, stale_cutoff_minutes=60)
    assert evaluate(make_task(25), NOW, policy).intents[0].kind == IntentKind.DUE_SOON
    assert evaluate(make_task(20), NOW, policy).intents[0].kind == IntentKind.MISSED
    assert evaluate(make_task(-61), NOW, policy).record is None
    assert evaluate(make_task(25), NOW, policy).window == "30min"


def test_other_windows_are_untouched() -> None:
    task = make_task(10, reminders={"30min": True})
    apply(task)
    doc = task.to_document()
    assert doc["reminders"]["30min"] is True
    assert doc["reminders"]["15min"]["status"] == "sent"


def test_legacy_boolean_record_is_treated_as_stale() -> None:
    task = make_task(10, reminders={"15min": True})
    result = evaluate(task, NOW)
    assert len(result.intents) == 1


def test_record_with_unknown_status_is_not_terminal() -> None:
    due = canonical_instant(NOW + timedelta(minutes=10))
    task = make_task(10, reminders={"15min": {"status": "queued", "forDueDate": due}})
    assert len(evaluate(task, NOW).intents) == 1


def test_invalid_due_date_raises() -> None:
    task = Task.from_document({"id": "t1", "text": "x", "dueDate": "next tuesday"})
    with pytest.raises(TaskDataError):
        evaluate(task, NOW)


def test_minutes_left_truncates_toward_zero() -> None:
    assert minutes_left(NOW + timedelta(minutes=15, seconds=59), NOW) == 15
    assert minutes_left(NOW - timedelta(seconds=59), NOW) == 0
    assert minutes_left(NOW - timedelta(minutes=1, seconds=1), NOW) == -1


def test_canonical_instant_formats() -> None:
    assert canonical_instant("2026-10-19T12:00:00Z") == "2026-10-19T12:00:00.000Z"
    assert canonical_instant("2026-10-19T12:00:00.123456+00:00") == "2026-10-19T12:00:00.123Z"
    assert canonical_instant(datetime(2026, 10, 19, 12, 0)) == "2026-10-19T12:00:00.000Z"
    assert ReminderRecord.from_db("nope") is None
