"""Watch a directory for new photos and upload them with rclone."""
from __future__ import annotations

from .config import UploaderConfig, load_config
from .exceptions import ConfigError, PhotoUploaderError, UploadError, WatcherError
from .publisher import PhotoUploader, main, run_watchdog

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "PhotoUploader",
    "PhotoUploaderError",
    "UploadError",
    "UploaderConfig",
    "WatcherError",
    "load_config",
    "main",
    "run_watchdog",
]
