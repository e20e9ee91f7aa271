"""Fixed pool of upload workers draining the pending-upload queue."""
from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from threading import Event
from typing import List, Optional

from ..config import UploadConfig
from ..exceptions import UploadAttemptError, UploadError
from .rclone import RcloneUploader
from .upload_queue import UploadQueue

LOGGER = logging.getLogger("photo_uploader.publisher.worker")


class UploadWorkerPool:
    """Run ``concurrent_uploads`` long-lived workers that shell out to rclone."""

    def __init__(
        self,
        *,
        upload_queue: UploadQueue,
        uploader: RcloneUploader,
        settings: UploadConfig,
        delete_after_upload: bool,
        stop_event: Optional[Event] = None,
    ) -> None:
        self.queue = upload_queue
        self.uploader = uploader
        self.worker_count = max(1, settings.concurrent_uploads)
        self.retry_count = max(1, settings.retry_count)
        self.retry_interval = max(0.0, settings.retry_interval)
        self.delete_after_upload = delete_after_upload
        self.stop_event = stop_event or Event()

        self._executor: Optional[ThreadPoolExecutor] = None
        self._futures: List[Future] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._executor is not None:
            return
        self._executor = ThreadPoolExecutor(
            max_workers=self.worker_count,
            thread_name_prefix="upload-worker",
        )
        self._futures = [
            self._executor.submit(self._worker_loop, worker_id)
            for worker_id in range(self.worker_count)
        ]
        LOGGER.info(
            "Upload pool started (workers=%d retries=%d destination=%s)",
            self.worker_count,
            self.retry_count,
            self.uploader.destination,
        )

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for every worker loop to return."""

        if self._executor is None:
            return
        for future in self._futures:
            future.result(timeout=timeout)
        self._executor.shutdown(wait=True)
        self._executor = None
        self._futures = []

    # ------------------------------------------------------------------
    # Worker loop
    # ------------------------------------------------------------------
    def _worker_loop(self, worker_id: int) -> None:
        LOGGER.info("Upload worker %d started", worker_id)
        while True:
            path = self.queue.get(self.stop_event)
            if path is None:
                break
            try:
                self.process(path, worker_id=worker_id)
            except Exception:
                LOGGER.exception("Worker %d: unexpected error handling %s", worker_id, path)
        LOGGER.info("Upload worker %d stopped", worker_id)

    def process(self, path: Path, *, worker_id: int = 0) -> bool:
        """Upload one file and apply the post-upload policy; return success."""

        LOGGER.info("Worker %d: uploading %s", worker_id, path)
        try:
            self.upload_with_retry(path)
        except UploadError as exc:
            LOGGER.error("Worker %d: upload failed for %s: %s", worker_id, path, exc)
            return False

        LOGGER.info("Worker %d: upload completed %s", worker_id, path)
        if self.delete_after_upload:
            self._delete_local(path, worker_id)
        return True

    def upload_with_retry(self, path: Path) -> None:
        if not path.exists():
            raise UploadError(f"file does not exist: {path}")

        for attempt in range(1, self.retry_count + 1):
            try:
                self.uploader.copy(path)
            except UploadAttemptError as exc:
                LOGGER.warning(
                    "Upload attempt %d/%d failed for %s: %s",
                    attempt,
                    self.retry_count,
                    path,
                    exc,
                )
                if attempt == self.retry_count:
                    raise UploadError(
                        f"gave up after {self.retry_count} attempt(s): {exc}"
                    ) from exc
                # a popped item runs all of its attempts even once a stop is requested
                time.sleep(self.retry_interval)
            else:
                return

    @staticmethod
    def _delete_local(path: Path, worker_id: int) -> None:
        try:
            path.unlink()
        except OSError as exc:
            LOGGER.error("Worker %d: failed to delete %s: %s", worker_id, path, exc)
        else:
            LOGGER.info("Worker %d: deleted %s", worker_id, path)


__all__ = ["UploadWorkerPool"]
