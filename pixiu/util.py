"""Small helpers for parsing numbers and managing directories."""

from __future__ import annotations

import os
import re
from pathlib import Path

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def parse_int64(s: str) -> int:
    """Parse a base-10 signed 64-bit integer; an empty string gives 0."""
    if not s:
        return 0
    if not _INT_PATTERN.fullmatch(s):
        raise ValueError(f"invalid syntax for int64: {s!r}")
    value = int(s, 10)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"value out of range for int64: {s!r}")
    return value


def is_directory_exists(path: str | os.PathLike) -> bool:
    """Return True if ``path`` exists and is a directory."""
    try:
        return Path(path).stat() is not None and Path(path).is_dir()
    except OSError:
        return False


def is_file_exists(path: str | os.PathLike) -> bool:
    """Return True if ``path`` exists and is not a directory."""
    try:
        Path(path).stat()
    except OSError:
        return False
    return not Path(path).is_dir()


def ensure_directory_exists(path: str | os.PathLike) -> None:
    """Create ``path`` and any missing parents if it is not already a directory."""
    if not is_directory_exists(path):
        os.makedirs(path, mode=0o755, exist_ok=True)