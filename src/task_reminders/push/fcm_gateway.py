# src/task_reminders/push/fcm_gateway.py

from __future__ import annotations

import firebase_admin
from firebase_admin import messaging

from ..core.ports import PushMessage


def build_fcm_message(message: PushMessage) -> messaging.Message:
    webpush = None
    if message.link:
        # The link makes the browser notification clickable.
        webpush = messaging.WebpushConfig(fcm_options=messaging.WebpushFCMOptions(link=message.link))
    return messaging.Message(
        token=message.token,
        notification=messaging.Notification(title=message.title, body=message.body),
        webpush=webpush,
    )


class FcmPushGateway:
    """PushGateway over Firebase Cloud Messaging. Raises FirebaseError on rejection."""

    def __init__(self, app: firebase_admin.App) -> None:
        self._app = app

    def send(self, message: PushMessage) -> None:
        messaging.send(build_fcm_message(message), app=self._app)
