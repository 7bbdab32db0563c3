# src/indexing/pipeline.py — v2
"""Pipeline coordinator: validate, allocate a run, sequence scan and embed.

Collaborators (store, embedder, chunker) are constructed by the caller and
injected. Every step returns a RunReport; on failure the report is marked
``fail``, keeps every artifact written so far and is raised inside a
StepFailedError chained to the cause.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from wsindex.chunking.token_chunker import TokenChunker
from wsindex.config.settings import Settings
from wsindex.core.errors import RequestValidationError, StepFailedError
from wsindex.core.models import RunReport, WorkspaceRequest
from wsindex.indexing.embedding import EmbedResult, EmbeddingOrchestrator
from wsindex.indexing.scanner import ScanResult, WorkspaceScanner
from wsindex.logging.context import clear_context, set_run_context
from wsindex.rag.embeddings.base_embedder import BaseEmbedder
from wsindex.rag.graph_store.base_graph_store import BaseGraphStore
from wsindex.storage.run_manager import Run, begin_run

logger = logging.getLogger(__name__)

STEP_SCAN = "index.scan"
STEP_EMBED = "index.embed"
STEP_ALL = "index.all"


def validate_request(request: WorkspaceRequest) -> Path:
    """Check request fields and resolve the workspace root.

    Returns:
        Absolute path of the workspace root.

    Raises:
        RequestValidationError: A field is empty or the root is not a directory.
    """
    if not request.workspace_root.strip():
        raise RequestValidationError("workspace_root is required")
    if not request.workspace_id.strip():
        raise RequestValidationError("workspace_id is required")
    root = Path(request.workspace_root).expanduser()
    try:
        root = root.resolve(strict=True)
    except OSError as e:
        raise RequestValidationError(f"workspace_root {request.workspace_root}: {e}") from e
    if not root.is_dir():
        raise RequestValidationError(
            f"workspace_root {request.workspace_root} is not a directory"
        )
    return root


def _scan_notes(result: ScanResult) -> list[str]:
    return [f"scanned {len(result.directories)} directories and {len(result.files)} files"]


def _embed_notes(result: EmbedResult) -> list[str]:
    notes = [
        f"embedded {len(result.chunks)} chunks from {result.file_count} files",
        f"native_dim={result.native_dim}",
    ]
    if result.centroid is not None:
        notes.append(f"centroid over {result.centroid.sample_count} vectors")
    if result.undecodable:
        notes.append(
            f"skipped {len(result.undecodable)} non-UTF-8 files: {', '.join(result.undecodable)}"
        )
    return notes


class WorkspaceIndexer:
    """Run the scan, embed and all steps against one store and executor.

    Args:
        settings: Application settings (artifact root, batching, provenance).
        store: Storage backend.
        embedder: Embedding executor client.
        chunker: Token-aware chunker.
    """

    def __init__(
        self,
        settings: Settings,
        store: BaseGraphStore,
        embedder: BaseEmbedder,
        chunker: TokenChunker,
    ) -> None:
        self._settings = settings
        skip_dirs = settings.skip_dirs_list
        self._scanner = WorkspaceScanner(store, skip_dirs=skip_dirs)
        self._embedding = EmbeddingOrchestrator(
            store,
            embedder,
            chunker,
            model_sha=settings.embed_model_sha,
            effective_dim=settings.effective_dim,
            transform_id=settings.transform_id,
            batch_size=settings.embed_batch_size,
            max_file_bytes=settings.max_embed_file_bytes,
            binary_probe_bytes=settings.binary_probe_bytes,
            skip_dirs=skip_dirs,
        )

    async def scan(
        self, request: WorkspaceRequest, cancel: asyncio.Event | None = None,
    ) -> RunReport:
        """Scan the workspace and persist directory/file metadata."""
        run, report = self._begin(request, STEP_SCAN)
        try:
            result = await self._run_scan(run, report, cancel)
            report.notes.extend(_scan_notes(result))
            report.succeed(run.artifacts())
            logger.info("Step %s passed", STEP_SCAN)
            return report
        finally:
            clear_context()

    async def embed(
        self, request: WorkspaceRequest, cancel: asyncio.Event | None = None,
    ) -> RunReport:
        """Chunk and embed the workspace, persisting vectors and the centroid."""
        run, report = self._begin(request, STEP_EMBED)
        try:
            result = await self._run_embed(run, report, cancel)
            report.notes.extend(_embed_notes(result))
            report.succeed(run.artifacts())
            logger.info("Step %s passed", STEP_EMBED)
            return report
        finally:
            clear_context()

    async def all(
        self, request: WorkspaceRequest, cancel: asyncio.Event | None = None,
    ) -> RunReport:
        """Scan then embed under one run. Embed is skipped when scan fails."""
        run, report = self._begin(request, STEP_ALL)
        try:
            scanned = await self._run_scan(run, report, cancel)
            report.notes.extend(_scan_notes(scanned))
            embedded = await self._run_embed(run, report, cancel)
            report.notes.extend(_embed_notes(embedded))
            report.succeed(run.artifacts())
            logger.info("Step %s passed", STEP_ALL)
            return report
        finally:
            clear_context()

    def _begin(self, request: WorkspaceRequest, step: str) -> tuple[Run, RunReport]:
        root = validate_request(request)
        run = begin_run(
            self._settings.artifact_root,
            workspace_id=request.workspace_id.strip(),
            workspace_root=str(root),
            step=step,
            run_id=request.run_id,
        )
        set_run_context(run.workspace_id, run.run_id, step)
        logger.info("Starting %s for %s (run=%s)", step, root, run.run_id)
        report = RunReport(run_id=run.run_id, step=step, started=run.started_at)
        return run, report

    async def _run_scan(
        self, run: Run, report: RunReport, cancel: asyncio.Event | None,
    ) -> ScanResult:
        try:
            return await self._scanner.scan(run, cancel)
        except Exception as e:
            self._fail(run, report, f"scan failed: {e}")
            raise StepFailedError(f"{run.step}: scan failed: {e}", report) from e

    async def _run_embed(
        self, run: Run, report: RunReport, cancel: asyncio.Event | None,
    ) -> EmbedResult:
        try:
            return await self._embedding.embed(run, cancel)
        except Exception as e:
            self._fail(run, report, f"embedding failed: {e}")
            raise StepFailedError(f"{run.step}: embedding failed: {e}", report) from e

    @staticmethod
    def _fail(run: Run, report: RunReport, risk: str) -> None:
        report.fail(risk, run.artifacts())
        logger.error("Step %s failed: %s", run.step, risk)
