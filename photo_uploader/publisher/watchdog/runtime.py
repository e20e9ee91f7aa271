"""Runtime helpers for the photo upload watchdog."""
from __future__ import annotations

import logging
import signal
import sys
from pathlib import Path
from threading import Event
from typing import Callable, Optional, Union

from watchdog.observers.api import BaseObserver

from ...config import UploaderConfig, load_config, load_dotenv_if_present, resolve_config_path
from ...exceptions import ConfigError, WatcherError
from ...logging_config import configure_logging
from ..queue_worker import UploadWorkerPool
from ..rclone import RcloneUploader, Runner
from ..upload_queue import UploadQueue
from .handler import ImageCreatedHandler, start_observer

LOGGER = logging.getLogger("photo_uploader.publisher.runtime")


class PhotoUploader:
    """Own the observer, the queue and the worker pool for one watch directory."""

    def __init__(
        self,
        config: UploaderConfig,
        *,
        stop_event: Optional[Event] = None,
        runner: Optional[Runner] = None,
        observer_factory: Optional[Callable[[], BaseObserver]] = None,
    ) -> None:
        self.config = config
        self.stop_event = stop_event or Event()
        self.queue = UploadQueue(maxsize=config.upload.queue_size)
        self.pool = UploadWorkerPool(
            upload_queue=self.queue,
            uploader=RcloneUploader(config.rclone, runner=runner),
            settings=config.upload,
            delete_after_upload=config.rclone.delete_after_upload,
            stop_event=self.stop_event,
        )
        self.handler = ImageCreatedHandler(
            watch_directory=config.watch_directory,
            extensions=config.supported_extensions,
            upload_queue=self.queue,
            settle_delay=config.upload.wait_time,
            stop_event=self.stop_event,
        )
        self._observer_factory = observer_factory
        self._observer: Optional[BaseObserver] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        LOGGER.info("Starting photo uploader")
        directory = self.config.watch_directory
        if not directory.is_dir():
            raise WatcherError(f"Watch directory does not exist: {directory}")

        self.pool.start()
        observer = self._observer_factory() if self._observer_factory else None
        self._observer = start_observer(directory, self.handler, observer=observer)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Cancel, close the watcher and the queue, then wait for every thread."""

        LOGGER.info("Stopping photo uploader")
        self.stop_event.set()
        if self._observer is not None:
            self._observer.stop()
        self.queue.close()
        if self._observer is not None:
            self._observer.join(timeout=timeout)
            self._observer = None
        self.pool.join(timeout=timeout)
        LOGGER.info("Photo uploader stopped")

    def wait(self, poll_interval: float = 0.5) -> None:
        while not self.stop_event.wait(poll_interval):
            pass


def run_watchdog(
    config_path: Optional[Union[str, Path]] = None,
    *,
    stop_event: Optional[Event] = None,
    runner: Optional[Runner] = None,
) -> int:
    """Run the upload watchdog until interrupted and return the exit code."""

    load_dotenv_if_present()
    path = resolve_config_path(config_path)
    try:
        config = load_config(path)
    except ConfigError as exc:
        print(f"Failed to load configuration: {exc}", file=sys.stderr)
        return 1

    try:
        configure_logging(config.logging)
    except OSError as exc:
        print(f"Failed to configure logging: {exc}", file=sys.stderr)
        return 1
    LOGGER.info("Using configuration %s", path)

    effective_stop_event = stop_event or Event()
    uploader = PhotoUploader(config, stop_event=effective_stop_event, runner=runner)

    def _signal_handler(signum: int, _frame: object) -> None:
        LOGGER.info("Signal %s received; shutting down", signum)
        effective_stop_event.set()

    _install_signal_handlers(_signal_handler)
    try:
        uploader.start()
        uploader.wait()
    except WatcherError as exc:
        LOGGER.error("Failed to start watcher: %s", exc)
        return 1
    except KeyboardInterrupt:
        LOGGER.info("Keyboard interrupt received; stopping")
    finally:
        uploader.stop()
    return 0


def _install_signal_handlers(handler: Callable[[int, object], None]) -> None:
    try:
        signal.signal(signal.SIGINT, handler)
        signal.signal(signal.SIGTERM, handler)
    except ValueError:
        # signal handlers can only be installed from the main thread
        LOGGER.debug("Signal handlers not installed: not running in the main thread")


__all__ = ["PhotoUploader", "run_watchdog"]
