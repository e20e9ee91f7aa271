"""Watchdog upload service utilities."""
from __future__ import annotations

from .handler import ImageCreatedHandler, start_observer
from .runtime import PhotoUploader, run_watchdog

__all__ = ["ImageCreatedHandler", "PhotoUploader", "run_watchdog", "start_observer"]
