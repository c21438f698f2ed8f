# src/task_reminders/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

APP_LOGGER = "task_reminders"

# Chatty transports underneath firebase-admin; their INFO/DEBUG never helps a cron run.
QUIET_LOGGERS = ("urllib3", "google.auth", "google.api_core", "grpc")


class ThirdPartyFilter(logging.Filter):
    """
    Pass records from our own package; everything else only at `min_level`+.

    Warnings captured from `warnings.warn` arrive as 'py.warnings' and count as third-party.
    """

    def __init__(self, app_prefix: str = APP_LOGGER, min_level: int = logging.ERROR) -> None:
        super().__init__()
        self.app_prefix = app_prefix
        self.min_level = min_level

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == self.app_prefix or name.startswith(self.app_prefix + "."):
            return True
        return record.levelno >= self.min_level


def setup_logging(
    *,
    log_dir: str | Path | None = ".local/task_reminders",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    third_party_level: int = logging.ERROR,
) -> Path | None:
    """
    Configure the root logger for one run.

    stderr gets our records at `console_level` and other libraries only at
    `third_party_level` (cron mails / journald keep this). When `log_dir` is set,
    a file there receives everything at `file_level`, unfiltered.

    Returns the log file path, or None for console-only logging.
    Call this ONCE, before the first log record.
    """
    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(ThirdPartyFilter(min_level=third_party_level))
    root.addHandler(console)

    log_file: Path | None = None
    if log_dir is not None:
        log_file = Path(log_dir) / f"{APP_LOGGER}.log"
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
