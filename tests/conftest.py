from __future__ import annotations

import logging
import subprocess
import threading
import time
from pathlib import Path
from typing import Callable, List

import pytest

from photo_uploader.config import RcloneConfig, UploadConfig, UploaderConfig


class RecordingRunner:
    """Stand-in for ``subprocess.run`` that records rclone command lines."""

    def __init__(self, returncodes: List[int] | None = None, default: int = 0) -> None:
        self.commands: list[list[str]] = []
        self._returncodes = list(returncodes or [])
        self._default = default
        self._lock = threading.Lock()

    def __call__(self, command: List[str]) -> subprocess.CompletedProcess:
        with self._lock:
            self.commands.append(list(command))
            code = self._returncodes.pop(0) if self._returncodes else self._default
        return subprocess.CompletedProcess(command, code)


def wait_for(predicate: Callable[[], bool], timeout: float = 10.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return predicate()


@pytest.fixture()
def make_config(tmp_path: Path):
    def _factory(**overrides) -> UploaderConfig:
        rclone = overrides.pop("rclone", RcloneConfig(remote_name="gphotos", album_name="album/Test"))
        upload = overrides.pop(
            "upload",
            UploadConfig(concurrent_uploads=1, wait_time=0.0, retry_count=3, retry_interval=0.0),
        )
        return UploaderConfig(
            watch_directory=overrides.pop("watch_directory", tmp_path),
            supported_extensions=overrides.pop("supported_extensions", (".heic", ".jpg")),
            rclone=rclone,
            upload=upload,
            **overrides,
        )

    return _factory


@pytest.fixture(autouse=True)
def _isolate_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
