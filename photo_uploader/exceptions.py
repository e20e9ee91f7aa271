"""Custom exceptions raised by the photo uploader."""
from __future__ import annotations


class PhotoUploaderError(RuntimeError):
    """Base error for the photo uploader package."""


class ConfigError(PhotoUploaderError):
    """Raised when the settings file cannot be read or parsed."""


class WatcherError(PhotoUploaderError):
    """Raised when the watch directory cannot be observed."""


class UploadError(PhotoUploaderError):
    """Raised when a queued file cannot be uploaded."""


class UploadAttemptError(UploadError):
    """Raised when a single rclone invocation fails or cannot be launched."""

    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode
