# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

Records handed to the store are explicit per-type models; they are turned
into the store's dynamic document format only through ``store_document``
and into NDJSON evidence rows only through ``artifact_row``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field


# === REQUEST ===


class WorkspaceRequest(BaseModel):
    """Entry contract shared by the scan, embed and all operations."""

    workspace_root: str
    workspace_id: str
    run_id: str | None = None


# === SCAN RECORDS ===


class DirectoryRecord(BaseModel):
    """A scanned directory. ``content_hash`` marks the path, not the children."""

    relpath: str
    content_hash: str
    mtime: datetime

    def artifact_row(self) -> dict[str, Any]:
        return {
            "relpath": self.relpath,
            "hash": self.content_hash,
            "mtime": self.mtime.isoformat(),
        }

    def store_document(self, workspace_id: str) -> dict[str, Any]:
        return {
            "ws": workspace_id,
            "relpath": self.relpath,
            "sha": self.content_hash,
            "mtime": self.mtime.isoformat(),
        }


class FileRecord(BaseModel):
    """A scanned regular file. ``language`` is a hint only."""

    relpath: str
    content_hash: str
    mtime: datetime
    size: int
    language: str

    def artifact_row(self) -> dict[str, Any]:
        return {
            "relpath": self.relpath,
            "size": self.size,
            "mtime": self.mtime.isoformat(),
            "hash": self.content_hash,
            "lang": self.language,
        }

    def store_document(self, workspace_id: str) -> dict[str, Any]:
        return {
            "ws": workspace_id,
            "relpath": self.relpath,
            "lang": self.language,
            "size": self.size,
            "mtime": self.mtime.isoformat(),
            "sha": self.content_hash,
        }


# === EMBEDDING RECORDS ===


class Chunk(BaseModel):
    """Token-bounded slice of one file's text.

    ``start``/``end`` are UTF-8 byte offsets into the file text. Chunks of
    one file are contiguous: ``chunk[i].end == chunk[i + 1].start``.
    """

    relpath: str
    index: int
    start: int
    end: int
    token_count: int
    text: str = Field(repr=False)
    content_hash: str
    vector: list[float] = Field(default_factory=list, repr=False)
    native_dim: int = 0

    @property
    def size(self) -> int:
        return self.end - self.start

    def artifact_row(self) -> dict[str, Any]:
        return {
            "relpath": self.relpath,
            "index": self.index,
            "start": self.start,
            "end": self.end,
            "token_count": self.token_count,
            "content_sha": self.content_hash,
            "size": self.size,
            "vector": self.vector,
            "native_dim": self.native_dim,
        }


class VectorModel(BaseModel):
    """Embedding model metadata, keyed by its normalized slug."""

    slug: str
    family: str
    version: str
    native_dim: int
    model_sha: str
    notes: str = ""

    def store_document(self) -> dict[str, Any]:
        return {
            "id_slug": self.slug,
            "family": self.family,
            "version": self.version,
            "native_dim": self.native_dim,
            "model_sha": self.model_sha,
            "notes": self.notes,
        }


class WorkspaceCentroid(BaseModel):
    """Per-dimension mean of every chunk vector at the native dimension."""

    workspace_id: str
    kind: str = "centroid@file"
    model: str
    vector: list[float] = Field(repr=False)
    sample_count: int

    def store_document(self, ts: datetime) -> dict[str, Any]:
        return {
            "ws": self.workspace_id,
            "kind": self.kind,
            "model": self.model,
            "vector": self.vector,
            "sample": self.sample_count,
            "ts": ts.isoformat(),
        }


# === RUN REPORTING ===


class RunReport(BaseModel):
    """Outcome of one pipeline step, returned to the caller even on failure."""

    run_id: str
    step: str
    started: datetime
    finished: datetime | None = None
    acceptance: Literal["pass", "fail"] | None = None
    artifact_paths: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)

    def fail(self, risk: str, artifact_paths: list[str]) -> None:
        """Mark the report failed, keeping every artifact produced so far."""
        self.acceptance = "fail"
        self.risks.append(risk)
        self.artifact_paths = list(artifact_paths)
        self.finished = datetime.now(timezone.utc)

    def succeed(self, artifact_paths: list[str]) -> None:
        self.acceptance = "pass"
        self.artifact_paths = list(artifact_paths)
        self.finished = datetime.now(timezone.utc)
