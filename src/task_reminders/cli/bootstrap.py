# src/task_reminders/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- turns the service-account blob into a firebase-admin App (only when needed),
- wires the configured store and push gateway into an AppContext.
"""

from __future__ import annotations

import json
import logging

import firebase_admin
from firebase_admin import credentials

from ..config import CREDENTIALS_ENV, get_settings
from ..core.ports import DocumentStore, PushGateway
from ..core.state import AppContext
from ..push.fcm_gateway import FcmPushGateway
from ..push.log_gateway import LoggingPushGateway
from ..stores.firestore_store import FirestoreDocumentStore
from ..stores.sqlite_store import SQLiteDocumentStore

logger = logging.getLogger(__name__)


class CredentialsError(RuntimeError):
    """Service-account credentials are missing or unusable."""


def load_service_account(raw: str | None) -> dict:
    if not raw:
        raise CredentialsError(f"{CREDENTIALS_ENV} is not set")
    try:
        info = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CredentialsError(f"{CREDENTIALS_ENV} is not valid JSON: {e}") from e
    if not isinstance(info, dict):
        raise CredentialsError(f"{CREDENTIALS_ENV} must be a JSON object")
    return info


def init_firebase_app(raw_credentials: str | None) -> firebase_admin.App:
    """Initialize the default firebase-admin App once per process."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    info = load_service_account(raw_credentials)
    try:
        cred = credentials.Certificate(info)
    except ValueError as e:
        raise CredentialsError(f"invalid service account: {e}") from e

    app = firebase_admin.initialize_app(cred)
    logger.info("Firebase Admin initialized project=%s", app.project_id)
    return app


def create_context(*, settings=None) -> AppContext:
    """
    Create the AppContext from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    store: DocumentStore
    if settings.store_backend == "sqlite":
        store = SQLiteDocumentStore(settings.sqlite_path)
    else:
        store = FirestoreDocumentStore(init_firebase_app(settings.credentials_json))

    gateway: PushGateway
    if settings.push_backend == "log":
        gateway = LoggingPushGateway()
    else:
        # Reuses the App created for the store, if any.
        gateway = FcmPushGateway(init_firebase_app(settings.credentials_json))

    logger.info("Backends: store=%s push=%s", settings.store_backend, settings.push_backend)
    return AppContext(settings=settings, store=store, gateway=gateway)
