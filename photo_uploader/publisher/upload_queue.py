"""Bounded FIFO of pending uploads shared by the watcher and the workers."""
from __future__ import annotations

import logging
import queue
from pathlib import Path
from threading import Event
from typing import Optional

LOGGER = logging.getLogger("photo_uploader.publisher.queue")

_POLL_INTERVAL = 0.25


class UploadQueue:
    """Thread-safe bounded queue whose blocking calls honour a stop event."""

    def __init__(self, maxsize: int = 100) -> None:
        self.maxsize = max(1, maxsize)
        self._queue: "queue.Queue[Path]" = queue.Queue(maxsize=self.maxsize)
        self._closed = Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def qsize(self) -> int:
        return self._queue.qsize()

    def put(self, path: Path, stop_event: Event) -> bool:
        """Enqueue ``path``; return ``False`` if abandoned on stop or close."""

        while not stop_event.is_set() and not self._closed.is_set():
            try:
                self._queue.put(path, timeout=_POLL_INTERVAL)
            except queue.Full:
                continue
            return True
        LOGGER.debug("Abandoned enqueue of %s: queue stopping", path)
        return False

    def get(self, stop_event: Event) -> Optional[Path]:
        """Pop the next path, or ``None`` once stopped or closed."""

        while not stop_event.is_set() and not self._closed.is_set():
            try:
                return self._queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
        return None

    def close(self) -> int:
        """Reject further puts and discard anything still queued."""

        self._closed.set()
        discarded = 0
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
            discarded += 1
        if discarded:
            LOGGER.warning("Discarded %d pending upload(s) on close", discarded)
        return discarded


__all__ = ["UploadQueue"]
