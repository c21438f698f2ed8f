# src/task_reminders/reminders/dispatcher.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ..core.ports import PushGateway, PushMessage
from .reminder_models import NotificationIntent

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class DeliveryResult:
    token: str
    ok: bool
    reason: str | None = None


def short_token(token: str) -> str:
    """Tokens are credentials of a sort; never log them whole."""
    return token if len(token) <= 12 else f"{token[:6]}…{token[-4:]}"


def dedupe_tokens(tokens: Iterable[str]) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for t in tokens:
        if not t or t in seen:
            continue
        seen.add(t)
        out.append(t)
    return out


class NotificationDispatcher:
    """
    Best-effort push delivery.

    One gateway attempt per token, no retries. A failing token is reported in its
    DeliveryResult and never affects the other tokens or the caller.
    """

    def __init__(
        self,
        gateway: PushGateway,
        *,
        link: str | None = None,
        timeout_seconds: float = 15.0,
    ) -> None:
        self._gateway = gateway
        self._link = link or None
        self._timeout = max(0.1, float(timeout_seconds))

    async def send(self, token: str, title: str, body: str) -> DeliveryResult:
        message = PushMessage(token=token, title=title, body=body, link=self._link)
        try:
            await asyncio.wait_for(asyncio.to_thread(self._gateway.send, message), self._timeout)
        except asyncio.TimeoutError:
            logger.warning("push timed out after %.1fs token=%s", self._timeout, short_token(token))
            return DeliveryResult(token=token, ok=False, reason="timeout")
        except Exception as e:
            logger.warning("push failed token=%s: %s", short_token(token), e)
            return DeliveryResult(token=token, ok=False, reason=str(e) or e.__class__.__name__)

        logger.debug("push accepted token=%s", short_token(token))
        return DeliveryResult(token=token, ok=True)

    async def deliver(self, intent: NotificationIntent, tokens: Iterable[str]) -> list[DeliveryResult]:
        targets = dedupe_tokens(tokens)
        if not targets:
            return []
        return list(
            await asyncio.gather(*(self.send(t, intent.title, intent.body) for t in targets))
        )
