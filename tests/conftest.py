# tests/conftest.py — v2
"""Shared test fixtures for unit tests.

Provides an in-memory store, a deterministic embedder, a character-level
encoding and a small sample workspace. No network and no real store.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

import pytest

from wsindex.chunking.token_chunker import TokenChunker
from wsindex.config.settings import Settings
from wsindex.core.errors import StoreError
from wsindex.indexing.pipeline import WorkspaceIndexer
from wsindex.rag.embeddings.base_embedder import BaseEmbedder
from wsindex.rag.graph_store.base_graph_store import BaseGraphStore


# === FAKE COLLABORATORS ===


class CharEncoding:
    """One token per character; every window decodes on a character boundary."""

    def encode(self, text: str, *, disallowed_special: Sequence[str] = ()) -> list[int]:
        return [ord(c) for c in text]

    def decode_bytes(self, tokens: Sequence[int]) -> bytes:
        return "".join(chr(t) for t in tokens).encode("utf-8")


class FakeStore(BaseGraphStore):
    """In-memory store recording documents and edges."""

    def __init__(self, fail_on_table: str | None = None) -> None:
        self.records: dict[tuple[str, str], dict[str, Any]] = {}
        self.edges: set[tuple[str, str, str, str, str]] = set()
        self.fail_on_table = fail_on_table

    def _check(self, table: str) -> None:
        if table == self.fail_on_table:
            raise StoreError(f"forced failure on {table}")

    async def upsert(self, table: str, record_id: str, fields: Mapping[str, Any]) -> None:
        self._check(table)
        self.records[(table, record_id)] = dict(fields)

    async def merge(self, table: str, record_id: str, fields: Mapping[str, Any]) -> None:
        self._check(table)
        self.records.setdefault((table, record_id), {}).update(fields)

    async def relate(
        self,
        from_table: str,
        from_id: str,
        edge: str,
        to_table: str,
        to_id: str,
        data: Mapping[str, Any] | None = None,
    ) -> None:
        self._check(edge)
        self.edges.add((from_table, from_id, edge, to_table, to_id))

    async def query(self, statement: str, params: Mapping[str, Any] | None = None) -> list[Any]:
        return []

    @property
    def provider_name(self) -> str:
        return "memory"

    def table(self, name: str) -> dict[str, dict[str, Any]]:
        return {rid: doc for (t, rid), doc in self.records.items() if t == name}

    def edges_named(self, name: str) -> set[tuple[str, str, str, str, str]]:
        return {e for e in self.edges if e[2] == name}


class FakeEmbedder(BaseEmbedder):
    """Deterministic 4-dimensional vectors derived from the input text."""

    def __init__(self, model: str = "nomic-embed-text:v1.5", drop_last: bool = False) -> None:
        self._model = model
        self.drop_last = drop_last
        self.batches: list[list[str]] = []

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        self.batches.append(list(texts))
        vectors = [
            [float(len(t)), float(sum(map(ord, t)) % 97), float(t.count("\n")), 1.0]
            for t in texts
        ]
        if self.drop_last:
            vectors = vectors[:-1]
        return vectors

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def model_name(self) -> str:
        return self._model


# === FIXTURES ===


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def char_chunker() -> TokenChunker:
    """Chunker over CharEncoding with an 8-token budget."""
    return TokenChunker(CharEncoding(), max_tokens_per_chunk=8)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        embed_url="http://127.0.0.1:9/v1/embeddings",
        embed_model="nomic-embed-text:v1.5",
        embed_model_sha="sha256:test",
        effective_dim=4,
        transform_id="identity",
        artifact_root=tmp_path / "artifacts",
    )


@pytest.fixture
def sample_workspace(tmp_path: Path) -> Path:
    """Two source files plus a version-control directory that must be skipped."""
    root = tmp_path / "workspace"
    (root / "src").mkdir(parents=True)
    (root / "README.md").write_bytes(b"# Title\nBody text\n")
    (root / "src" / "main.ext").write_bytes(b"func main() {\n\treturn 0\n}\n")
    (root / ".git").mkdir()
    (root / ".git" / "HEAD").write_bytes(b"ref: refs/heads/main\n")
    return root


@pytest.fixture
def indexer(
    settings: Settings,
    fake_store: FakeStore,
    fake_embedder: FakeEmbedder,
    char_chunker: TokenChunker,
) -> WorkspaceIndexer:
    return WorkspaceIndexer(settings, fake_store, fake_embedder, char_chunker)


@pytest.fixture(autouse=True)
def _reset_wsindex_logger():
    """Drop handlers installed by setup_logging so they never outlive a test."""
    yield
    root = logging.getLogger("wsindex")
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
