# src/indexing/embedding.py — v2
"""Embedding orchestrator: chunk eligible files, embed, persist vectors.

The workspace is re-walked independently of the scanner so embedding can
run on its own. Chunks are sent to the executor in fixed-size batches, in
order, and vectors are attached back by position. A workspace centroid (the
per-dimension mean over every chunk at the native dimension) is recomputed
wholesale on every run.

Files that are not valid UTF-8 are excluded rather than decoded lossily:
chunk offsets are byte offsets into the file and must index its real bytes.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

import numpy as np

from wsindex.chunking.token_chunker import TokenChunker
from wsindex.core.addressing import file_id, hash_string, vector_chunk_id, workspace_vector_id
from wsindex.core.errors import (
    EmbeddingError,
    NativeDimensionError,
    NothingToEmbedError,
    WalkError,
)
from wsindex.core.models import Chunk, VectorModel, WorkspaceCentroid
from wsindex.indexing.walker import DEFAULT_SKIP_DIRS, walk_workspace
from wsindex.rag.embeddings.base_embedder import BaseEmbedder
from wsindex.rag.graph_store import schema
from wsindex.rag.graph_store.base_graph_store import BaseGraphStore
from wsindex.storage import layout
from wsindex.storage.artifacts import write_ndjson
from wsindex.storage.run_manager import Run

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 16
DEFAULT_MAX_FILE_BYTES = 256 * 1024
DEFAULT_BINARY_PROBE_BYTES = 1024
CHUNK_GRANULARITY = "chunk"
CENTROID_KIND = "centroid@file"
MODEL_NOTES = "generated via wsindex"

_SLUG_SEPARATORS = re.compile(r"[ /:@._]")
_REPEATED_HYPHENS = re.compile(r"-{2,}")


def model_identifier(model: str) -> str:
    """Normalize a model name into a slug: ``nomic-embed-text:v1.5`` -> ``nomic-embed-text-v1-5``."""
    slug = _SLUG_SEPARATORS.sub("-", model.lower())
    slug = _REPEATED_HYPHENS.sub("-", slug)
    return slug.strip("-")


def split_model(model: str) -> tuple[str, str]:
    """Split a model name into (family, version) on its first hyphen."""
    family, sep, version = model.partition("-")
    if not sep:
        return model_identifier(model), "base"
    return family, version


def is_binary(content: bytes, probe_bytes: int = DEFAULT_BINARY_PROBE_BYTES) -> bool:
    """A NUL byte within the first ``probe_bytes`` marks content as binary."""
    return b"\x00" in content[:probe_bytes]


@dataclass
class EmbedResult:
    """Chunks, centroid and artifacts produced by one embedding run."""

    chunks: list[Chunk] = field(default_factory=list)
    native_dim: int = 0
    centroid: WorkspaceCentroid | None = None
    artifact_paths: list[str] = field(default_factory=list)
    undecodable: list[str] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len({c.relpath for c in self.chunks})


class EmbeddingOrchestrator:
    """Chunk, embed and persist every eligible file of a workspace."""

    def __init__(
        self,
        store: BaseGraphStore,
        embedder: BaseEmbedder,
        chunker: TokenChunker,
        model_sha: str,
        effective_dim: int,
        transform_id: str,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
        binary_probe_bytes: int = DEFAULT_BINARY_PROBE_BYTES,
        skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be > 0")
        self._store = store
        self._embedder = embedder
        self._chunker = chunker
        self._model_sha = model_sha
        self._effective_dim = effective_dim
        self._transform_id = transform_id
        self._batch_size = batch_size
        self._max_file_bytes = max_file_bytes
        self._probe_bytes = binary_probe_bytes
        self._skip_dirs = tuple(skip_dirs)

    async def embed(self, run: Run, cancel: asyncio.Event | None = None) -> EmbedResult:
        """Embed the workspace of ``run`` and persist vectors and centroid.

        Raises:
            NothingToEmbedError: No eligible file was found.
            EmbeddingError: Executor failure, count mismatch or empty vector.
            NativeDimensionError: No vector to derive the native dimension from.
            WalkError, WalkCancelledError, ChunkAlignmentError, ArtifactError,
            StoreError: Propagated from the collaborators.
        """
        undecodable: list[str] = []
        chunks = await self.collect_chunks(Path(run.workspace_root), cancel, undecodable)
        if not chunks:
            raise NothingToEmbedError("no embeddable files discovered")
        logger.info("Collected %d chunks for embedding", len(chunks))

        await self.populate_vectors(chunks)
        native_dim = self._native_dim(chunks)

        result = EmbedResult(chunks=chunks, native_dim=native_dim, undecodable=undecodable)
        artifact = write_ndjson(
            layout.vectors_artifact_path(run.artifact_dir),
            (c.artifact_row() for c in chunks),
        )
        run.add_artifact(artifact)
        result.artifact_paths.append(str(artifact))

        result.centroid = compute_centroid(
            run.workspace_id, model_identifier(self._embedder.model_name), chunks, native_dim,
        )
        await self._persist(run.workspace_id, result)
        return result

    async def collect_chunks(
        self,
        root: Path,
        cancel: asyncio.Event | None = None,
        undecodable: list[str] | None = None,
    ) -> list[Chunk]:
        """Chunk every regular, non-empty, non-binary UTF-8 file under the size ceiling.

        Relative paths of files skipped for invalid UTF-8 are appended to
        ``undecodable`` when given.
        """
        chunks: list[Chunk] = []
        async for entry in walk_workspace(root, self._skip_dirs, cancel):
            if entry.is_dir:
                continue
            size = entry.stat.st_size
            if size == 0 or size > self._max_file_bytes:
                continue
            try:
                content = entry.path.read_bytes()
            except OSError as e:
                raise WalkError(f"read {entry.path}: {e}") from e
            if is_binary(content, self._probe_bytes):
                logger.debug("Skipping binary file %s", entry.relpath)
                continue

            try:
                text = content.decode("utf-8")
            except UnicodeDecodeError as e:
                logger.warning("Skipping non-UTF-8 file %s: %s", entry.relpath, e.reason)
                if undecodable is not None:
                    undecodable.append(entry.relpath)
                continue
            for i, seg in enumerate(self._chunker.chunk(text)):
                chunks.append(
                    Chunk(
                        relpath=entry.relpath,
                        index=i,
                        start=seg.start,
                        end=seg.end,
                        token_count=seg.token_count,
                        text=seg.text,
                        content_hash=hash_string(seg.text),
                    )
                )
        return chunks

    async def populate_vectors(self, chunks: list[Chunk]) -> None:
        """Embed chunks batch by batch, attaching each vector to its chunk.

        Raises:
            EmbeddingError: A batch returned the wrong number of vectors or an
                empty vector.
        """
        for i in range(0, len(chunks), self._batch_size):
            batch = chunks[i:i + self._batch_size]
            logger.debug(
                "Embedding batch %d (%d chunks)", i // self._batch_size, len(batch),
            )
            vectors = await self._embedder.embed_texts([c.text for c in batch])
            if len(vectors) != len(batch):
                raise EmbeddingError(
                    f"embedding count mismatch for batch starting at "
                    f"{batch[0].relpath}#{batch[0].index}: "
                    f"expected {len(batch)} got {len(vectors)}"
                )
            for chunk, vec in zip(batch, vectors):
                if not vec:
                    raise EmbeddingError(
                        f"embedding returned empty vector for {chunk.relpath}#{chunk.index}"
                    )
                chunk.vector = list(vec)
                chunk.native_dim = len(vec)

    @staticmethod
    def _native_dim(chunks: list[Chunk]) -> int:
        for c in chunks:
            if c.vector:
                return len(c.vector)
        raise NativeDimensionError("no vectors available to determine native dim")

    async def _persist(self, workspace_id: str, result: EmbedResult) -> None:
        store = self._store
        model_name = self._embedder.model_name
        slug = model_identifier(model_name)
        family, version = split_model(model_name)
        ts = datetime.now(timezone.utc)

        model = VectorModel(
            slug=slug,
            family=family,
            version=version,
            native_dim=result.native_dim,
            model_sha=self._model_sha,
            notes=MODEL_NOTES,
        )
        await store.upsert(schema.VECTOR_MODEL, slug, model.store_document())

        for chunk in result.chunks:
            if not chunk.vector:
                raise EmbeddingError(f"missing embedding for {chunk.relpath}")
            fid = file_id(workspace_id, chunk.relpath)
            vid = vector_chunk_id(workspace_id, fid, CHUNK_GRANULARITY, chunk.index)
            await store.upsert(
                schema.VECTOR_CHUNK, vid, self._chunk_document(workspace_id, fid, slug, chunk, ts),
            )
            await store.relate(schema.FILE, fid, schema.FILE_HAS_VECTOR, schema.VECTOR_CHUNK, vid)

        centroid = result.centroid
        if centroid is not None:
            wid = workspace_vector_id(workspace_id, slug, centroid.kind)
            await store.upsert(schema.WORKSPACE_VECTOR, wid, centroid.store_document(ts))
            await store.relate(
                schema.WORKSPACE, workspace_id, schema.WORKSPACE_HAS_VECTOR,
                schema.WORKSPACE_VECTOR, wid,
            )
        logger.info(
            "Persisted %d vectors (model=%s, native_dim=%d)",
            len(result.chunks), slug, result.native_dim,
        )

    def _chunk_document(
        self, workspace_id: str, owner_file_id: str, slug: str, chunk: Chunk, ts: datetime,
    ) -> dict[str, Any]:
        return {
            "ws": workspace_id,
            "file": owner_file_id,
            "granularity": CHUNK_GRANULARITY,
            "index": chunk.index,
            "start": chunk.start,
            "end": chunk.end,
            "token_count": chunk.token_count,
            "content_sha": chunk.content_hash,
            "model": slug,
            "model_sha": self._model_sha,
            "native_dim": chunk.native_dim,
            "effective_dim": self._effective_dim,
            "transform_id": self._transform_id,
            "vector": chunk.vector,
            "ts": ts.isoformat(),
        }


def compute_centroid(
    workspace_id: str,
    model_slug: str,
    chunks: list[Chunk],
    native_dim: int,
) -> WorkspaceCentroid | None:
    """Mean vector over every chunk whose vector length equals ``native_dim``."""
    vectors = [c.vector for c in chunks if len(c.vector) == native_dim]
    if not vectors or native_dim <= 0:
        return None
    mean = np.asarray(vectors, dtype=np.float64).mean(axis=0)
    return WorkspaceCentroid(
        workspace_id=workspace_id,
        kind=CENTROID_KIND,
        model=model_slug,
        vector=mean.tolist(),
        sample_count=len(vectors),
    )
