# src/indexing/scanner.py — v2
"""Workspace scanner: walk, hash and persist directory/file metadata.

Every directory and regular file under the workspace root is recorded with
a content-addressed key, written to ``files.ndjson`` / ``dirs.ndjson`` and
upserted into the store together with its containment edges. Re-scanning an
unchanged tree recomputes identical keys, so the store writes converge.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from wsindex.core.addressing import dir_id, file_id, hash_file, hash_string
from wsindex.core.errors import WalkError
from wsindex.core.models import DirectoryRecord, FileRecord
from wsindex.indexing.languages import detect_language
from wsindex.indexing.walker import DEFAULT_SKIP_DIRS, parent_relpath, walk_workspace
from wsindex.rag.graph_store import schema
from wsindex.rag.graph_store.base_graph_store import BaseGraphStore
from wsindex.storage import layout
from wsindex.storage.artifacts import write_ndjson
from wsindex.storage.run_manager import Run

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Records and artifacts produced by one scan."""

    directories: list[DirectoryRecord] = field(default_factory=list)
    files: list[FileRecord] = field(default_factory=list)
    artifact_paths: list[str] = field(default_factory=list)


def _mtime(stat_mtime: float) -> datetime:
    return datetime.fromtimestamp(stat_mtime, tz=timezone.utc)


class WorkspaceScanner:
    """Scan a workspace tree into directory/file records and store rows."""

    def __init__(
        self,
        store: BaseGraphStore,
        skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
    ) -> None:
        self._store = store
        self._skip_dirs = tuple(skip_dirs)

    async def scan(self, run: Run, cancel: asyncio.Event | None = None) -> ScanResult:
        """Walk ``run.workspace_root`` and persist what was found.

        The NDJSON artifacts are written and registered with the run before
        any store write, so evidence survives a store failure.

        Raises:
            WalkError: Walk or hashing failed.
            WalkCancelledError: ``cancel`` was set during the walk.
            ArtifactError: An artifact could not be written.
            StoreError: A store write failed.
        """
        root = Path(run.workspace_root)
        result = ScanResult()
        async for entry in walk_workspace(root, self._skip_dirs, cancel):
            mtime = _mtime(entry.stat.st_mtime)
            if entry.is_dir:
                result.directories.append(
                    DirectoryRecord(
                        relpath=entry.relpath,
                        content_hash=hash_string(str(entry.path)),
                        mtime=mtime,
                    )
                )
                continue
            try:
                digest = hash_file(entry.path)
            except OSError as e:
                raise WalkError(f"hash {entry.path}: {e}") from e
            result.files.append(
                FileRecord(
                    relpath=entry.relpath,
                    content_hash=digest,
                    mtime=mtime,
                    size=entry.stat.st_size,
                    language=detect_language(entry.relpath),
                )
            )
        logger.info(
            "Scanned %d directories and %d files under %s",
            len(result.directories), len(result.files), root,
        )

        files_path = write_ndjson(
            layout.files_artifact_path(run.artifact_dir),
            (f.artifact_row() for f in result.files),
        )
        run.add_artifact(files_path)
        result.artifact_paths.append(str(files_path))

        dirs_path = write_ndjson(
            layout.dirs_artifact_path(run.artifact_dir),
            (d.artifact_row() for d in result.directories),
        )
        run.add_artifact(dirs_path)
        result.artifact_paths.append(str(dirs_path))

        await self._persist(run.workspace_id, str(root), result)
        return result

    async def _persist(self, workspace_id: str, root: str, result: ScanResult) -> None:
        store = self._store
        # Keeps edges from dangling; fields owned by registration are preserved.
        await store.merge(schema.WORKSPACE, workspace_id, {"path": root})

        for d in result.directories:
            did = dir_id(workspace_id, d.relpath)
            await store.upsert(schema.DIRECTORY, did, d.store_document(workspace_id))
            await store.relate(
                schema.WORKSPACE, workspace_id, schema.WS_CONTAINS_DIR, schema.DIRECTORY, did,
            )
            if d.relpath:
                parent = dir_id(workspace_id, parent_relpath(d.relpath))
                await store.relate(
                    schema.DIRECTORY, parent, schema.DIR_CONTAINS_DIR, schema.DIRECTORY, did,
                )

        for f in result.files:
            fid = file_id(workspace_id, f.relpath)
            await store.upsert(schema.FILE, fid, f.store_document(workspace_id))
            parent = dir_id(workspace_id, parent_relpath(f.relpath))
            await store.relate(
                schema.DIRECTORY, parent, schema.DIR_CONTAINS_FILE, schema.FILE, fid,
            )
        logger.debug(
            "Persisted scan of workspace %s (%d dirs, %d files)",
            workspace_id, len(result.directories), len(result.files),
        )
