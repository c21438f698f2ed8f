# src/task_reminders/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds the AppContext, runs exactly one scan-and-notify
pass and exits. Meant to be triggered by cron (or any recurring scheduler);
there are no arguments.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from ..cli.bootstrap import create_context
from ..config import get_settings
from ..logging_setup import setup_logging
from ..reminders.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    try:
        ctx = create_context(settings=settings)
        summary = asyncio.run(Orchestrator.from_context(ctx).run_once())
    except Exception:
        logger.exception("Run failed.")
        return 1

    if summary.users_failed:
        logger.warning("%d user(s) skipped because of errors.", summary.users_failed)
    logger.info("Total reminders sent: %d", summary.reminders_sent)
    return 0


if __name__ == "__main__":
    sys.exit(main())
