"""Utility helpers shared across the photo uploader."""
from __future__ import annotations

from .coerce import (
    coerce_float,
    coerce_int,
    to_bool,
    to_optional_str,
    to_string_sequence,
)
from .concurrency import sleep_with_stop

__all__ = [
    "to_bool",
    "to_optional_str",
    "to_string_sequence",
    "coerce_int",
    "coerce_float",
    "sleep_with_stop",
]
