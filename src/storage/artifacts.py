# src/storage/artifacts.py — v1
"""NDJSON evidence writer for run artifacts."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from wsindex.core.errors import ArtifactError

logger = logging.getLogger(__name__)


def write_ndjson(path: Path, rows: Iterable[dict[str, Any]]) -> Path:
    """Write one JSON object per line, truncating any previous file.

    Raises:
        ArtifactError: If the file cannot be opened or written.
    """
    count = 0
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            for row in rows:
                f.write(json.dumps(row, ensure_ascii=False, default=str))
                f.write("\n")
                count += 1
    except OSError as e:
        raise ArtifactError(f"write artifact {path}: {e}") from e
    logger.debug("Wrote %d rows to %s", count, path)
    return path


def read_ndjson(path: Path) -> list[dict[str, Any]]:
    """Load every row of an NDJSON artifact."""
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]
