# src/rag/embeddings/http_embedder.py — v1
"""HTTP embedding executor adapter (local inference servers).

POSTs ``{"model": ..., "input": [...]}`` to a single endpoint and accepts
either an OpenAI-style ``{"data": [{"embedding": [...]}]}`` body or an
Ollama-style ``{"embeddings": [[...]]}`` body.
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.request
from typing import Any

from wsindex.core.errors import EmbeddingError
from wsindex.rag.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)

_ERROR_BODY_LIMIT = 4096


class HttpEmbedder(BaseEmbedder):
    """Embeddings via a plain HTTP executor endpoint."""

    def __init__(
        self,
        endpoint: str,
        model: str,
        timeout: float = 120.0,
    ) -> None:
        self._endpoint = endpoint.rstrip("/")
        self._model_name = model
        self._timeout = timeout

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed texts in one request; the request runs off the event loop."""
        if not texts:
            return []
        logger.debug("POST %s model=%s inputs=%d", self._endpoint, self._model_name, len(texts))
        data = await asyncio.to_thread(self._post, texts)
        vectors = _parse_vectors(data)
        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"embed response count mismatch: expected {len(texts)} got {len(vectors)}"
            )
        return vectors

    def _post(self, texts: list[str]) -> Any:
        payload = json.dumps({"model": self._model_name, "input": texts}).encode("utf-8")
        req = urllib.request.Request(
            self._endpoint,
            data=payload,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as e:
            detail = e.read(_ERROR_BODY_LIMIT).decode("utf-8", errors="replace").strip()
            raise EmbeddingError(f"embed http {e.code}: {detail}") from e
        except (urllib.error.URLError, OSError) as e:
            raise EmbeddingError(f"embed http request: {e}") from e
        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise EmbeddingError(f"decode embed response: {e}") from e

    @property
    def provider_name(self) -> str:
        return "http"

    @property
    def model_name(self) -> str:
        return self._model_name


def _parse_vectors(data: Any) -> list[list[float]]:
    """Extract vectors from an OpenAI-style or Ollama-style response body."""
    if not isinstance(data, dict):
        raise EmbeddingError("decode embed response: expected a JSON object")
    if "data" in data:
        rows = data["data"] or []
        try:
            return [[float(x) for x in row.get("embedding") or []] for row in rows]
        except (AttributeError, TypeError, ValueError) as e:
            raise EmbeddingError(f"decode embed response: {e}") from e
    if "embeddings" in data:
        try:
            return [[float(x) for x in row or []] for row in data["embeddings"] or []]
        except (TypeError, ValueError) as e:
            raise EmbeddingError(f"decode embed response: {e}") from e
    raise EmbeddingError("decode embed response: no 'data' or 'embeddings' field")
