# src/rag/graph_store/graph_store_factory.py — v2
"""Factory: instantiate the store backend from configuration."""

from __future__ import annotations

import logging

from wsindex.config.settings import Settings
from wsindex.rag.graph_store.base_graph_store import BaseGraphStore

logger = logging.getLogger(__name__)


class UnsupportedGraphStoreError(ValueError):
    """Raised when a store backend is not supported."""


def create_graph_store(settings: Settings) -> BaseGraphStore:
    """Instantiate the configured store.

    Args:
        settings: Application settings (STORE_BACKEND, ARANGO_*).

    Raises:
        UnsupportedGraphStoreError: If the backend is not supported.
    """
    backend = settings.store_backend

    if backend == "arangodb":
        from wsindex.rag.graph_store.arangodb_store import ArangoDBStore

        logger.debug("Creating store: backend=%s url=%s", backend, settings.arango_url)
        return ArangoDBStore(
            url=settings.arango_url,
            database=settings.arango_database,
            user=settings.arango_user,
            password=settings.arango_password,
            request_timeout=settings.store_request_timeout,
        )

    raise UnsupportedGraphStoreError(
        f"Unsupported store backend: {backend!r}. Available: arangodb"
    )
