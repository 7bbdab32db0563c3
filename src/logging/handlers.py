# src/logging/handlers.py — v2
"""Size-based rotating file handler for log files.

Rotation sizes are written as ``<n><unit>`` with unit B, K/KB, M/MB or G/GB;
a bare number is a byte count.
"""

from __future__ import annotations

import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

_SIZE_PATTERN = re.compile(r"^(\d+)\s*([KMG]?B?)$", re.IGNORECASE)
_UNIT_BYTES = {"": 1, "B": 1, "K": 1024, "M": 1024**2, "G": 1024**3}


def _parse_size(size_str: str) -> int:
    """Parse a rotation size such as '10MB', '512K' or '4096' into bytes."""
    match = _SIZE_PATTERN.match(size_str.strip())
    if not match:
        raise ValueError(f"Invalid size format: {size_str!r}. Use e.g. '10MB'.")
    unit = match.group(2).upper()
    if unit != "B":
        unit = unit.rstrip("B")
    return int(match.group(1)) * _UNIT_BYTES[unit]


def create_rotating_handler(
    log_file: str | Path,
    rotation: str = "10MB",
    retention: int = 30,
) -> RotatingFileHandler:
    """Open a rotating handler on ``log_file``, creating its directory.

    Args:
        log_file: Path to log file; ``~`` is expanded.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.
    """
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=_parse_size(rotation),
        backupCount=max(retention, 0),
        encoding="utf-8",
        delay=True,
    )
