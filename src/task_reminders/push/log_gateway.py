# src/task_reminders/push/log_gateway.py

from __future__ import annotations

import logging

from ..core.ports import PushMessage

logger = logging.getLogger(__name__)


class LoggingPushGateway:
    """
    Dry-run gateway used for local runs when no push credentials are configured.

    Every message is accepted and written to the log instead of being delivered.
    """

    def __init__(self) -> None:
        self.sent: list[PushMessage] = []

    def send(self, message: PushMessage) -> None:
        self.sent.append(message)
        logger.info("[dry-run] push token=%s… title=%r body=%r", message.token[:6], message.title, message.body)
