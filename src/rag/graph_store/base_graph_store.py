# src/rag/graph_store/base_graph_store.py — v2
"""Abstract multi-model store interface.

The pipeline needs four primitives: full upsert, partial merge, idempotent
edge creation and ad-hoc declarative queries. Identifiers passed in are the
content-addressed strings from ``core.addressing``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping


class BaseGraphStore(ABC):
    """Unified interface for store backends."""

    @abstractmethod
    async def upsert(self, table: str, record_id: str, fields: Mapping[str, Any]) -> None:
        """Create or fully replace the record ``table:record_id``."""

    @abstractmethod
    async def merge(self, table: str, record_id: str, fields: Mapping[str, Any]) -> None:
        """Create the record or update only the given fields, keeping the rest."""

    @abstractmethod
    async def relate(
        self,
        from_table: str,
        from_id: str,
        edge: str,
        to_table: str,
        to_id: str,
        data: Mapping[str, Any] | None = None,
    ) -> None:
        """Create the directed edge ``from -edge-> to``; repeating it is a no-op."""

    @abstractmethod
    async def query(self, statement: str, params: Mapping[str, Any] | None = None) -> list[Any]:
        """Run a backend-native declarative statement and return its rows."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (arangodb)."""
