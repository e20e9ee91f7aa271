#!/usr/bin/env python3
"""Thin CLI wrapper for the upload watchdog runtime."""
from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from .watchdog import run_watchdog


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Watch a directory and upload new photos with rclone.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML settings file (default: $CONFIG_PATH or config.yaml).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    return run_watchdog(args.config)


if __name__ == "__main__":
    sys.exit(main())
