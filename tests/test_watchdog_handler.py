from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest
from watchdog.events import DirCreatedEvent, FileCreatedEvent, FileMovedEvent

from photo_uploader.exceptions import WatcherError
from photo_uploader.publisher.upload_queue import UploadQueue
from photo_uploader.publisher.watchdog.handler import (
    ImageCreatedHandler,
    file_extension,
    start_observer,
)


def _handler(watch_dir: Path, *, settle_delay: float = 0.0, maxsize: int = 10) -> ImageCreatedHandler:
    return ImageCreatedHandler(
        watch_directory=watch_dir,
        extensions=(".heic", ".jpg"),
        upload_queue=UploadQueue(maxsize=maxsize),
        settle_delay=settle_delay,
        stop_event=threading.Event(),
    )


@pytest.mark.parametrize("name", ["notes.txt", "clip.mov", "archive.heic.zip", "noextension"])
def test_unsupported_extensions_are_ignored(tmp_path: Path, name: str) -> None:
    handler = _handler(tmp_path)

    handler.dispatch(FileCreatedEvent(str(tmp_path / name)))

    assert handler.queue.qsize() == 0


@pytest.mark.parametrize("name", ["a.heic", "B.HEIC", "c.Jpg"])
def test_supported_extensions_enqueue_once(tmp_path: Path, name: str) -> None:
    handler = _handler(tmp_path)

    handler.dispatch(FileCreatedEvent(str(tmp_path / name)))

    assert handler.queue.qsize() == 1
    assert handler.queue.get(handler.stop_event) == tmp_path / name


@pytest.mark.parametrize(
    "name, expected",
    [
        ("a.heic", ".heic"),
        ("IMG_0001.HEIC", ".heic"),
        ("archive.heic.zip", ".zip"),
        (".heic", ".heic"),
        ("heic", ""),
    ],
)
def test_file_extension_uses_last_dot(name: str, expected: str) -> None:
    assert file_extension(Path("/tmp") / name) == expected


def test_is_supported_ignores_case(tmp_path: Path) -> None:
    handler = _handler(tmp_path)

    assert handler.is_supported(Path("/tmp/A.HEIC"))
    assert handler.is_supported(Path("/tmp/b.jpg"))
    assert not handler.is_supported(Path("/tmp/c.png"))


def test_bare_dotfile_with_image_extension_is_queued(tmp_path: Path) -> None:
    handler = _handler(tmp_path)

    handler.dispatch(FileCreatedEvent(str(tmp_path / ".heic")))

    assert handler.queue.qsize() == 1


def test_directory_events_are_ignored(tmp_path: Path) -> None:
    handler = _handler(tmp_path)

    handler.dispatch(DirCreatedEvent(str(tmp_path / "album.jpg")))

    assert handler.queue.qsize() == 0


def test_enqueue_happens_after_settle_delay(tmp_path: Path) -> None:
    handler = _handler(tmp_path, settle_delay=0.4)

    started = time.monotonic()
    assert handler.handle_file_created(str(tmp_path / "a.heic")) is True

    assert time.monotonic() - started >= 0.4
    assert handler.queue.qsize() == 1


def test_recreated_file_is_enqueued_again(tmp_path: Path) -> None:
    handler = _handler(tmp_path)
    event = FileCreatedEvent(str(tmp_path / "a.heic"))

    handler.dispatch(event)
    handler.dispatch(event)

    assert handler.queue.qsize() == 2


def test_rename_into_watch_directory_counts_as_creation(tmp_path: Path) -> None:
    handler = _handler(tmp_path)

    handler.dispatch(FileMovedEvent(str(tmp_path / "a.heic.part"), str(tmp_path / "a.heic")))
    handler.dispatch(FileMovedEvent(str(tmp_path / "b.heic"), str(tmp_path / "sub" / "b.heic")))

    assert handler.queue.qsize() == 1
    assert handler.queue.get(handler.stop_event) == tmp_path / "a.heic"


def test_stop_during_settle_abandons_enqueue(tmp_path: Path) -> None:
    handler = _handler(tmp_path, settle_delay=30.0)
    timer = threading.Timer(0.3, handler.stop_event.set)
    timer.start()
    try:
        assert handler.handle_file_created(str(tmp_path / "a.heic")) is False
    finally:
        timer.cancel()

    assert handler.queue.qsize() == 0


def test_blocked_enqueue_aborts_on_stop(tmp_path: Path) -> None:
    handler = _handler(tmp_path, maxsize=1)
    handler.handle_file_created(str(tmp_path / "first.heic"))

    results: list[bool] = []
    worker = threading.Thread(
        target=lambda: results.append(handler.handle_file_created(str(tmp_path / "second.heic")))
    )
    worker.start()
    time.sleep(0.3)
    handler.stop_event.set()
    worker.join(timeout=2.0)

    assert not worker.is_alive()
    assert results == [False]


def test_handler_errors_are_logged_not_raised(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    handler = _handler(tmp_path)

    def _boom(path, stop_event):
        raise RuntimeError("queue exploded")

    monkeypatch.setattr(handler.queue, "put", _boom)

    handler.dispatch(FileCreatedEvent(str(tmp_path / "a.heic")))

    assert "Failed to handle filesystem event" in caplog.text


def test_start_observer_rejects_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(WatcherError):
        start_observer(tmp_path / "missing", _handler(tmp_path))
