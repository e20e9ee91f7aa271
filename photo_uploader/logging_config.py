"""Logging helpers for the photo uploader."""
from __future__ import annotations

import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import LoggingConfig

_FILE_HANDLER: Optional[RotatingFileHandler] = None

_LEVEL_ALIASES = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
    "critical": logging.CRITICAL,
}


def parse_level(name: Optional[str]) -> int:
    """Map a level name to a ``logging`` constant, defaulting to INFO."""

    if not name:
        return logging.INFO
    return _LEVEL_ALIASES.get(name.strip().lower(), logging.INFO)


def configure_logging(config: LoggingConfig) -> Optional[Path]:
    """Configure root logging for the uploader and return the log file, if any."""

    global _FILE_HANDLER

    root = logging.getLogger()
    root.setLevel(parse_level(config.level))
    for handler in list(root.handlers):
        root.removeHandler(handler)
    if _FILE_HANDLER is not None:
        _FILE_HANDLER.close()
        _FILE_HANDLER = None

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    log_file: Optional[Path] = None
    if config.file_path is not None:
        log_file = Path(config.file_path).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        if config.max_age > 0:
            pruned = prune_rotated_logs(log_file, max_age_days=config.max_age)
        else:
            pruned = 0
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=config.max_size * 1024 * 1024,
            backupCount=config.max_backups,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        _FILE_HANDLER = file_handler
        root.info("Logging to %s", log_file)
        if pruned:
            root.info("Removed %d expired log backup(s)", pruned)
    else:
        root.debug("File logging disabled; streaming only")

    return log_file


def prune_rotated_logs(log_file: Path, *, max_age_days: int, now: Optional[float] = None) -> int:
    """Delete rotated backups of ``log_file`` older than ``max_age_days``."""

    cutoff = (now if now is not None else time.time()) - max_age_days * 86400
    removed = 0
    for candidate in log_file.parent.glob(f"{log_file.name}.*"):
        suffix = candidate.name[len(log_file.name) + 1:]
        if not suffix.isdigit():
            continue
        try:
            if candidate.stat().st_mtime >= cutoff:
                continue
            candidate.unlink()
        except OSError:
            continue
        removed += 1
    return removed


__all__ = ["configure_logging", "parse_level", "prune_rotated_logs"]
