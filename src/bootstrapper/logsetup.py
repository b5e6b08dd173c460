"""Logging configuration for the Bootstrapper CLI."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from bootstrapper.config import LoggingSettings

LOG_FILENAME = "bootstrapper.log"
_HANDLER_MARKER = "_bootstrapper_handler"


def configure_logging(settings: LoggingSettings, log_dir: Path | None = None) -> None:
    """Attach console and rotating file handlers to the package logger.

    Repeated calls replace the handlers installed by earlier calls.

    Args:
        settings: Logging configuration (level and rotation limits).
        log_dir: Directory for ``bootstrapper.log``; file logging is skipped when None.
    """
    logger = logging.getLogger("bootstrapper")
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    console_handler.setLevel(level)
    setattr(console_handler, _HANDLER_MARKER, True)
    logger.addHandler(console_handler)

    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_dir / LOG_FILENAME,
                maxBytes=max(settings.max_size_mb, 1) * 1024 * 1024,
                backupCount=max(settings.backup_count, 0),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.warning("File logging disabled: %s", exc)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            )
            setattr(file_handler, _HANDLER_MARKER, True)
            logger.addHandler(file_handler)
            logger.setLevel(min(level, logging.INFO))


__all__ = ["configure_logging", "LOG_FILENAME"]
