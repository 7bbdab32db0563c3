# src/rag/embeddings/openai_embedder.py — v2
"""OpenAI-compatible embedding adapter.

Uses the openai SDK; ``base_url`` points it at any compatible executor.
"""

from __future__ import annotations

import logging

from wsindex.core.errors import EmbeddingError
from wsindex.rag.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)


class OpenAIEmbedder(BaseEmbedder):
    """Embeddings via the OpenAI embeddings API."""

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 120.0,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._base_url = base_url or None
        self._timeout = timeout
        self.__client = None

    @property
    def _client(self):
        if self.__client is None:
            try:
                import openai
            except ImportError as e:
                raise ImportError(
                    "openai package required: pip install openai"
                ) from e
            self.__client = openai.AsyncOpenAI(
                api_key=self._api_key or "unused",
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=0,
            )
        return self.__client

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed texts; results are re-ordered by the response index."""
        if not texts:
            return []
        client = self._client
        import openai

        logger.debug("Embedding %d texts via %s", len(texts), self._model)

        try:
            response = await client.embeddings.create(input=texts, model=self._model)
        except openai.OpenAIError as e:
            raise EmbeddingError(f"embed request: {e}") from e
        rows = sorted(response.data, key=lambda item: item.index)
        if len(rows) != len(texts):
            raise EmbeddingError(
                f"embed response count mismatch: expected {len(texts)} got {len(rows)}"
            )
        return [list(item.embedding) for item in rows]

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model
