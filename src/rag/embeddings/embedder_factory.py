# src/rag/embeddings/embedder_factory.py — v3
"""Factory: instantiate the embedding executor client from configuration."""

from __future__ import annotations

import importlib
import logging

from wsindex.config.settings import Settings
from wsindex.rag.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)

_PROVIDER_REGISTRY: dict[str, str] = {
    "http": "wsindex.rag.embeddings.http_embedder.HttpEmbedder",
    "openai": "wsindex.rag.embeddings.openai_embedder.OpenAIEmbedder",
}


class UnsupportedEmbeddingProviderError(ValueError):
    """Raised when an embedding executor kind is not registered."""


def create_embedder(settings: Settings) -> BaseEmbedder:
    """Instantiate the configured embedding executor client.

    Args:
        settings: Application settings. Uses EMBED_KIND, EMBED_URL and EMBED_MODEL.
    """
    kind = settings.embed_kind
    if kind not in _PROVIDER_REGISTRY:
        raise UnsupportedEmbeddingProviderError(
            f"Unsupported embedding executor: {kind!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    cls = _import_class(_PROVIDER_REGISTRY[kind])

    kwargs: dict = {"model": settings.embed_model, "timeout": settings.embed_request_timeout}
    if kind == "http":
        kwargs["endpoint"] = settings.embed_url
    elif kind == "openai":
        kwargs["api_key"] = settings.embed_api_key
        kwargs["base_url"] = settings.embed_url

    logger.debug("Creating embedder: kind=%s model=%s", kind, settings.embed_model)
    return cls(**kwargs)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
