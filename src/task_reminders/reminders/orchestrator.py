# src/task_reminders/reminders/orchestrator.py

from __future__ import annotations

"""
Run orchestrator.

One pass over every user:
- load tasks (first storage layout that has any),
- load device tokens,
- run the reminder engine on each task,
- deliver emitted intents to every token,
- write updated reminder records back in one write per user.

Write-back happens only after all of a user's deliveries were attempted, so a
crash mid-run never marks a reminder as handled without having tried to send it.
A failing user is logged and skipped; the run goes on.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from ..core.state import AppContext
from .dispatcher import NotificationDispatcher
from .reminder_engine import DEFAULT_POLICY, ReminderPolicy, evaluate
from .task_source import TaskSource

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RunSummary:
    users_scanned: int = 0
    reminders_sent: int = 0  # dispatch attempts, not confirmed deliveries
    users_failed: int = 0
    deliveries_failed: int = 0


@dataclass(slots=True)
class _UserOutcome:
    attempts: int = 0
    failures: int = 0


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Orchestrator:
    def __init__(
        self,
        source: TaskSource,
        dispatcher: NotificationDispatcher,
        *,
        policy: ReminderPolicy = DEFAULT_POLICY,
        max_concurrent_users: int = 8,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._source = source
        self._dispatcher = dispatcher
        self._policy = policy
        self._max_concurrent = max(1, int(max_concurrent_users))
        self._clock = clock

    @classmethod
    def from_context(cls, ctx: AppContext, *, clock: Callable[[], datetime] = _utcnow) -> Orchestrator:
        s = ctx.settings
        policy = ReminderPolicy(
            lead_minutes=s.lead_minutes,
            window_minutes=s.window_minutes,
            stale_cutoff_minutes=s.stale_cutoff_minutes,
        )
        dispatcher = NotificationDispatcher(
            ctx.gateway,
            link=s.notification_link,
            timeout_seconds=s.dispatch_timeout_seconds,
        )
        return cls(
            TaskSource(ctx.store),
            dispatcher,
            policy=policy,
            max_concurrent_users=s.max_concurrent_users,
            clock=clock,
        )

    async def run_once(self) -> RunSummary:
        """
        Scan every user once.

        Listing users is not guarded: if the store is unreachable the run fails as a whole.
        """
        logger.info("Checking tasks due soon (lead=%smin)...", self._policy.lead_minutes)

        user_ids = await asyncio.to_thread(self._source.list_user_ids)
        summary = RunSummary()
        if not user_ids:
            logger.warning("No users found.")
            return summary

        now = self._clock()
        sem = asyncio.Semaphore(self._max_concurrent)

        async def guarded(user_id: str) -> _UserOutcome | None:
            async with sem:
                try:
                    return await self.process_user(user_id, now)
                except Exception:
                    logger.exception("user=%s failed; skipped for this run", user_id)
                    return None

        outcomes = await asyncio.gather(*(guarded(uid) for uid in user_ids))

        for outcome in outcomes:
            summary.users_scanned += 1
            if outcome is None:
                summary.users_failed += 1
                continue
            summary.reminders_sent += outcome.attempts
            summary.deliveries_failed += outcome.failures

        logger.info(
            "Done. users=%d reminders_sent=%d users_failed=%d deliveries_failed=%d",
            summary.users_scanned,
            summary.reminders_sent,
            summary.users_failed,
            summary.deliveries_failed,
        )
        return summary

    async def process_user(self, user_id: str, now: datetime) -> _UserOutcome:
        outcome = _UserOutcome()

        user_tasks = await asyncio.to_thread(self._source.load_user_tasks, user_id)
        if not user_tasks.tasks:
            logger.debug("user=%s no tasks", user_id)
            return outcome

        tokens = await asyncio.to_thread(self._source.load_tokens, user_id)
        if not tokens:
            logger.debug("user=%s no device tokens", user_id)
            return outcome

        name = await asyncio.to_thread(self._source.display_name, user_id)
        logger.info(
            "Checking user %s (%s): tasks=%d tokens=%d",
            name,
            user_id,
            len(user_tasks.tasks),
            len(tokens),
        )

        # Evaluate everything before sending anything: a malformed task must
        # fail the user before any push goes out, not after.
        results = [(task, evaluate(task, now, self._policy)) for task in user_tasks.tasks]

        for task, result in results:
            for intent in result.intents:
                logger.info(
                    "user=%s task=%s %s (%s mins left)",
                    user_id,
                    task.id,
                    intent.kind.value,
                    intent.minutes_left,
                )
                deliveries = await self._dispatcher.deliver(intent, tokens)
                outcome.attempts += len(deliveries)
                outcome.failures += sum(1 for d in deliveries if not d.ok)

        changed = False
        for task, result in results:
            if result.record is not None:
                task.set_reminder(result.window, result.record)
                changed = True

        if changed:
            await asyncio.to_thread(self._source.save_tasks, user_tasks)
            logger.debug("user=%s reminder state saved", user_id)

        return outcome
