# src/storage/run_manager.py — v2
"""Run lifecycle: derive run ids, allocate artifact directories, track artifacts."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from wsindex.core.errors import ArtifactError
from wsindex.storage import layout


@dataclass
class Run:
    """One timed execution of a pipeline step and its artifact directory."""

    run_id: str
    workspace_id: str
    workspace_root: str
    step: str
    started_at: datetime
    artifact_dir: Path
    _artifacts: list[str] = field(default_factory=list, repr=False)

    def add_artifact(self, path: Path | str) -> None:
        """Record an artifact path. Duplicates are kept, blanks ignored."""
        value = str(path)
        if not value.strip():
            return
        self._artifacts.append(value)

    def artifacts(self) -> list[str]:
        """Return a copy of the accumulated artifact paths."""
        return list(self._artifacts)


def _utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _rfc3339(ts: datetime) -> str:
    return ts.isoformat().replace("+00:00", "Z")


def generate_run_id(workspace_id: str, step: str, started_at: datetime | None = None) -> str:
    """Generate ``RUN-YYYYMMDD-<8 hex>`` from (workspace, step, start time).

    The same triple always yields the same id.
    """
    started = _utc(started_at or datetime.now(timezone.utc))
    material = "|".join([workspace_id, step, _rfc3339(started)]).encode("utf-8")
    digest = hashlib.sha256(material).digest()
    return f"RUN-{started.strftime('%Y%m%d')}-{digest[:4].hex()}"


def begin_run(
    artifact_root: Path,
    workspace_id: str,
    workspace_root: str,
    step: str,
    run_id: str | None = None,
    started_at: datetime | None = None,
) -> Run:
    """Allocate a run and create ``artifact_root/run_id/`` on disk.

    Args:
        artifact_root: Directory holding every run's artifacts.
        workspace_id: Stable workspace identifier.
        workspace_root: Absolute workspace path.
        step: Step identifier (e.g. "index.scan"); required.
        run_id: Caller-supplied id; derived deterministically when empty.
        started_at: Start timestamp; defaults to now (UTC).

    Raises:
        ValueError: If step is empty.
        ArtifactError: If the artifact directory cannot be created.
    """
    if not step.strip():
        raise ValueError("step is required")
    started = _utc(started_at or datetime.now(timezone.utc))
    rid = (run_id or "").strip() or generate_run_id(workspace_id, step, started)

    artifact_dir = layout.run_dir(Path(artifact_root), rid)
    try:
        artifact_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArtifactError(f"create artifact dir {artifact_dir}: {e}") from e

    return Run(
        run_id=rid,
        workspace_id=workspace_id,
        workspace_root=workspace_root,
        step=step,
        started_at=started,
        artifact_dir=artifact_dir,
    )
