"""Upload pipeline: pending-upload queue, rclone workers and the directory watchdog."""
from __future__ import annotations

from .queue_worker import UploadWorkerPool
from .rclone import RcloneUploader
from .upload_queue import UploadQueue
from .uploader import main
from .watchdog.runtime import PhotoUploader, run_watchdog

__all__ = [
    "PhotoUploader",
    "RcloneUploader",
    "UploadQueue",
    "UploadWorkerPool",
    "main",
    "run_watchdog",
]
