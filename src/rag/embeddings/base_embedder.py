# src/rag/embeddings/base_embedder.py — v3
"""Embedding executor contract used by the embedding orchestrator."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseEmbedder(ABC):
    """Turns batches of chunk text into vectors.

    Implementations return exactly one vector per input, in input order, and
    raise ``EmbeddingError`` for transport or response-shape failures. Vector
    width is whatever the model produces; callers infer it from the output.
    """

    @abstractmethod
    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Registry key the executor was created under (e.g. "http")."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model name as configured; the source of the model slug."""
