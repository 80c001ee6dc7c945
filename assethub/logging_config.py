"""Process-wide logging setup.

Handlers are attached to the root logger once during application startup.
When ``LOG_PATH`` is configured the records are mirrored into a size-rotated
``app-YYYY-MM-DD.log`` file alongside the console stream.
"""

from __future__ import annotations

import logging
from datetime import date
from logging.handlers import RotatingFileHandler
from pathlib import Path

from assethub.settings import AppSettings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 5

logger = logging.getLogger(__name__)


def log_file_path(directory: str | Path, today: date | None = None) -> Path:
    """Return the dated log file location inside ``directory``."""

    stamp = (today or date.today()).isoformat()
    return Path(directory) / f"app-{stamp}.log"


def configure_logging(settings: AppSettings) -> Path | None:
    """Configure root logging from ``settings`` and return the log file, if any."""

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file: Path | None = None

    if settings.log_path:
        log_file = log_file_path(settings.log_path)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUP_COUNT,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=settings.log_level_numeric,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    if log_file is not None:
        logger.info("File logging enabled at %s", log_file)
    return log_file


__all__ = ["LOG_FORMAT", "configure_logging", "log_file_path"]
