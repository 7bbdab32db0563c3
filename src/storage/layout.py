# src/storage/layout.py — v2
"""Artifact directory structure definition.

Every run owns ``<artifact_root>/<run_id>/`` holding its NDJSON evidence.
"""

from __future__ import annotations

from pathlib import Path

DIRS_ARTIFACT = "dirs.ndjson"
FILES_ARTIFACT = "files.ndjson"
VECTORS_ARTIFACT = "vectors.ndjson"


def run_dir(artifact_root: Path, run_id: str) -> Path:
    """Return the artifact directory of a run."""
    return artifact_root / run_id


def dirs_artifact_path(run_path: Path) -> Path:
    return run_path / DIRS_ARTIFACT


def files_artifact_path(run_path: Path) -> Path:
    return run_path / FILES_ARTIFACT


def vectors_artifact_path(run_path: Path) -> Path:
    return run_path / VECTORS_ARTIFACT
