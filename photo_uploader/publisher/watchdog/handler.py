"""Filesystem event handling for the watched photo directory."""
from __future__ import annotations

import logging
from pathlib import Path
from threading import Event
from typing import Iterable, Union

from watchdog.events import FileMovedEvent, FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from ...exceptions import WatcherError
from ...utils import sleep_with_stop
from ..upload_queue import UploadQueue

LOGGER = logging.getLogger("photo_uploader.publisher.watchdog")


class ImageCreatedHandler(FileSystemEventHandler):
    """Queue newly created files whose extension is in the allow-list."""

    def __init__(
        self,
        *,
        watch_directory: Path,
        extensions: Iterable[str],
        upload_queue: UploadQueue,
        settle_delay: float,
        stop_event: Event,
    ) -> None:
        super().__init__()
        self.watch_directory = Path(watch_directory).resolve()
        self.extensions = frozenset(ext.lower() for ext in extensions)
        self.queue = upload_queue
        self.settle_delay = max(0.0, settle_delay)
        self.stop_event = stop_event

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._guarded(_as_str(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        # a rename into the watched directory is reported as a new file
        if event.is_directory or not isinstance(event, FileMovedEvent):
            return
        dest = Path(_as_str(event.dest_path))
        if dest.resolve().parent != self.watch_directory:
            return
        self._guarded(str(dest))

    def is_supported(self, path: Path) -> bool:
        return file_extension(path) in self.extensions

    def handle_file_created(self, src_path: str) -> bool:
        """Settle then enqueue ``src_path``; return whether it was queued."""

        path = Path(src_path)
        if not self.is_supported(path):
            return False

        LOGGER.info("Detected new file %s", path)
        if not sleep_with_stop(self.settle_delay, self.stop_event):
            LOGGER.debug("Stop requested while settling %s", path)
            return False
        if not self.queue.put(path, self.stop_event):
            return False
        LOGGER.debug("Queued %s for upload", path)
        return True

    def _guarded(self, src_path: str) -> None:
        try:
            self.handle_file_created(src_path)
        except Exception:
            LOGGER.exception("Failed to handle filesystem event for %s", src_path)


def start_observer(
    watch_directory: Path,
    handler: FileSystemEventHandler,
    *,
    observer: BaseObserver | None = None,
) -> BaseObserver:
    """Schedule a non-recursive watch on ``watch_directory`` and start it."""

    directory = Path(watch_directory)
    if not directory.is_dir():
        raise WatcherError(f"Watch directory does not exist: {directory}")

    active = observer or Observer()
    try:
        active.schedule(handler, str(directory), recursive=False)
        active.start()
    except OSError as exc:
        raise WatcherError(f"Unable to watch {directory}: {exc}") from exc
    LOGGER.info("Watching %s for new files", directory)
    return active


def file_extension(path: Union[str, Path]) -> str:
    """Return the lower-cased text from the last dot of the file name, dot included.

    Unlike ``Path.suffix`` a bare dotfile such as ``.heic`` yields ``.heic``.
    """

    name = Path(path).name
    index = name.rfind(".")
    if index < 0:
        return ""
    return name[index:].lower()


def _as_str(value: Union[str, bytes]) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="surrogateescape")
    return value


__all__ = ["ImageCreatedHandler", "file_extension", "start_observer"]
