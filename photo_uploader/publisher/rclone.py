"""rclone invocation used by the upload workers."""
from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Callable, List, Optional

from ..config import RcloneConfig
from ..exceptions import UploadAttemptError

LOGGER = logging.getLogger("photo_uploader.publisher.rclone")

Runner = Callable[[List[str]], "subprocess.CompletedProcess[bytes]"]


def _run_passthrough(command: List[str]) -> "subprocess.CompletedProcess[bytes]":
    # stdout/stderr are inherited from the uploader process
    return subprocess.run(command, check=False)


class RcloneUploader:
    """Build and run ``rclone copy`` for a single local file."""

    def __init__(self, config: RcloneConfig, *, runner: Optional[Runner] = None) -> None:
        self.config = config
        self._runner = runner or _run_passthrough

    @property
    def destination(self) -> str:
        return self.config.destination

    def build_command(self, path: Path) -> List[str]:
        command = [self.config.binary, "copy", str(path), self.destination]
        if self.config.check_duplicates:
            command.append("--checksum")
        return command

    def copy(self, path: Path) -> None:
        """Run one upload attempt; raise :class:`UploadAttemptError` on failure."""

        command = self.build_command(path)
        LOGGER.debug("Running %s", shlex.join(command))
        try:
            result = self._runner(command)
        except OSError as exc:
            raise UploadAttemptError(
                f"Unable to launch {self.config.binary!r}: {exc}"
            ) from exc
        if result.returncode != 0:
            raise UploadAttemptError(
                f"{self.config.binary} exited with {result.returncode}",
                returncode=result.returncode,
            )


__all__ = ["RcloneUploader", "Runner"]
