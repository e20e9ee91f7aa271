"""Configuration helpers for the photo uploader."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import yaml
from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigError
from .utils import coerce_float, coerce_int, to_bool, to_optional_str, to_string_sequence

LOGGER = logging.getLogger(__name__)

CONFIG_PATH_ENV = "CONFIG_PATH"
DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULT_WATCH_DIRECTORY = "./photos"
DEFAULT_EXTENSIONS: Tuple[str, ...] = (".heic", ".heif")
DEFAULT_REMOTE_NAME = "gphotos"
DEFAULT_ALBUM_NAME = "upload"
DEFAULT_RCLONE_BINARY = "rclone"
DEFAULT_QUEUE_SIZE = 100


@dataclass(frozen=True)
class RcloneConfig:
    """Destination and flags passed to ``rclone copy``."""

    remote_name: str = DEFAULT_REMOTE_NAME
    album_name: str = DEFAULT_ALBUM_NAME
    delete_after_upload: bool = False
    check_duplicates: bool = True
    binary: str = DEFAULT_RCLONE_BINARY

    @property
    def destination(self) -> str:
        return f"{self.remote_name}:{self.album_name}"


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "info"
    file_path: Optional[Path] = None
    max_size: int = 0
    max_backups: int = 0
    max_age: int = 0


@dataclass(frozen=True)
class UploadConfig:
    """Worker pool sizing and retry policy."""

    concurrent_uploads: int = 2
    wait_time: float = 2.0
    retry_count: int = 3
    retry_interval: float = 5.0
    queue_size: int = DEFAULT_QUEUE_SIZE


@dataclass(frozen=True)
class UploaderConfig:
    """Immutable snapshot of the settings file, loaded once at startup."""

    watch_directory: Path
    supported_extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    rclone: RcloneConfig = RcloneConfig()
    logging: LoggingConfig = LoggingConfig()
    upload: UploadConfig = UploadConfig()


def load_dotenv_if_present() -> Optional[str]:
    """Load a ``.env`` file from the working directory without overriding."""

    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path, override=False)
        return dotenv_path
    return None


def resolve_config_path(explicit: Optional[Union[str, Path]] = None) -> Path:
    """Return the settings path from ``explicit``, ``CONFIG_PATH`` or the default."""

    if explicit:
        return Path(explicit).expanduser()
    env_value = to_optional_str(os.getenv(CONFIG_PATH_ENV))
    return Path(env_value or DEFAULT_CONFIG_PATH).expanduser()


def load_config(path: Union[str, Path]) -> UploaderConfig:
    """Read and parse the YAML settings file at ``path``."""

    config_path = Path(path)
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read config file {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file {config_path}: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ConfigError(f"Config file {config_path} must contain a mapping at the top level")

    config = build_config(payload)
    LOGGER.debug("Loaded configuration from %s", config_path)
    return config


def build_config(payload: Mapping[str, Any]) -> UploaderConfig:
    """Build an :class:`UploaderConfig` from a parsed settings mapping."""

    rclone_section = _section(payload, "rclone")
    logging_section = _section(payload, "logging")
    upload_section = _section(payload, "upload")

    rclone = RcloneConfig(
        remote_name=to_optional_str(rclone_section.get("remote_name")) or DEFAULT_REMOTE_NAME,
        album_name=to_optional_str(rclone_section.get("album_name")) or DEFAULT_ALBUM_NAME,
        delete_after_upload=to_bool(rclone_section.get("delete_after_upload"), default=False),
        check_duplicates=to_bool(rclone_section.get("check_duplicates"), default=True),
        binary=to_optional_str(rclone_section.get("binary")) or DEFAULT_RCLONE_BINARY,
    )

    file_path = to_optional_str(logging_section.get("file_path"))
    logging_cfg = LoggingConfig(
        level=to_optional_str(logging_section.get("level")) or "info",
        file_path=Path(file_path).expanduser() if file_path else None,
        max_size=max(0, coerce_int(logging_section.get("max_size"), 0)),
        max_backups=max(0, coerce_int(logging_section.get("max_backups"), 0)),
        max_age=max(0, coerce_int(logging_section.get("max_age"), 0)),
    )

    defaults = UploadConfig()
    upload = UploadConfig(
        concurrent_uploads=max(1, coerce_int(upload_section.get("concurrent_uploads"), defaults.concurrent_uploads)),
        wait_time=max(0.0, coerce_float(upload_section.get("wait_time"), defaults.wait_time)),
        retry_count=max(1, coerce_int(upload_section.get("retry_count"), defaults.retry_count)),
        retry_interval=max(0.0, coerce_float(upload_section.get("retry_interval"), defaults.retry_interval)),
        queue_size=max(1, coerce_int(upload_section.get("queue_size"), defaults.queue_size)),
    )

    watch_directory = to_optional_str(payload.get("watch_directory")) or DEFAULT_WATCH_DIRECTORY
    extensions = normalize_extensions(to_string_sequence(payload.get("supported_extensions")))

    return UploaderConfig(
        watch_directory=Path(watch_directory).expanduser(),
        supported_extensions=extensions or DEFAULT_EXTENSIONS,
        rclone=rclone,
        logging=logging_cfg,
        upload=upload,
    )


def normalize_extensions(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """Lower-case extensions and ensure each carries a leading dot."""

    if not values:
        return ()
    normalized: list[str] = []
    for value in values:
        candidate = value.strip().lower()
        if not candidate:
            continue
        if not candidate.startswith("."):
            candidate = f".{candidate}"
        if candidate not in normalized:
            normalized.append(candidate)
    return tuple(normalized)


def _section(payload: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = payload.get(key)
    if isinstance(value, Mapping):
        return dict(value)
    if value is not None:
        LOGGER.warning("Ignoring config section %r: expected a mapping", key)
    return {}


__all__ = [
    "CONFIG_PATH_ENV",
    "DEFAULT_CONFIG_PATH",
    "LoggingConfig",
    "RcloneConfig",
    "UploadConfig",
    "UploaderConfig",
    "build_config",
    "load_config",
    "load_dotenv_if_present",
    "normalize_extensions",
    "resolve_config_path",
]
