# src/rag/graph_store/arangodb_store.py — v3
"""ArangoDB store adapter.

Uses the python-arango SDK. Tables map to document collections and edge
names to edge collections, both created on first use. Edge keys are derived
from their endpoints so relating the same pair twice replaces one edge.
Requires: pip install python-arango.
"""

from __future__ import annotations

import logging
from urllib.parse import quote
from typing import Any, Mapping

from wsindex.core.addressing import hash_string
from wsindex.core.errors import StoreError
from wsindex.rag.graph_store.base_graph_store import BaseGraphStore

logger = logging.getLogger(__name__)

# Punctuation ArangoDB accepts in _key besides alphanumerics and '%'.
_KEY_SAFE = "_-:.@()+,=;$!*'"
EDGE_KEY_HEX = 20


class ArangoDBStore(BaseGraphStore):
    """Store backed by ArangoDB."""

    def __init__(
        self,
        url: str = "http://localhost:8529",
        database: str = "wsindex",
        user: str = "root",
        password: str = "",
        request_timeout: float = 60.0,
        db: Any | None = None,
    ) -> None:
        try:
            from arango import ArangoClient
            from arango.exceptions import ArangoError
        except ImportError as e:
            raise ImportError(
                "python-arango package required: pip install python-arango"
            ) from e

        self._errors: tuple[type[BaseException], ...] = (ArangoError, OSError)
        if db is None:
            client = ArangoClient(hosts=url, request_timeout=request_timeout)
            db = client.db(database, username=user, password=password)
        self._db = db
        self._ready: set[str] = set()

    @staticmethod
    def _doc_key(record_id: str) -> str:
        """Percent-encode a record id into a valid document _key.

        The encoding is injective: ``%`` itself is escaped, so distinct ids
        such as ``"my ws"`` and ``"my_ws"`` never share a key.
        """
        return quote(record_id, safe=_KEY_SAFE).replace("~", "%7E")

    def _doc_id(self, table: str, record_id: str) -> str:
        return f"{table}/{self._doc_key(record_id)}"

    @staticmethod
    def _edge_key(edge: str, src: str, dst: str) -> str:
        """Case-preserving digest of an edge's name and endpoints."""
        return f"{edge}-{hash_string('|'.join((edge, src, dst)))[:EDGE_KEY_HEX]}"

    def _collection(self, name: str, edge: bool = False) -> Any:
        """Return a collection, creating it if it doesn't exist."""
        if name not in self._ready:
            if not self._db.has_collection(name):
                self._db.create_collection(name, edge=edge)
                logger.info("Created %s collection %s", "edge" if edge else "document", name)
            self._ready.add(name)
        return self._db.collection(name)

    async def upsert(self, table: str, record_id: str, fields: Mapping[str, Any]) -> None:
        doc = dict(fields)
        doc["_key"] = self._doc_key(record_id)
        try:
            self._collection(table).insert(
                doc, overwrite=True, overwrite_mode="replace", silent=True,
            )
        except self._errors as e:
            raise StoreError(f"upsert {table}:{record_id}: {e}") from e

    async def merge(self, table: str, record_id: str, fields: Mapping[str, Any]) -> None:
        doc = dict(fields)
        doc["_key"] = self._doc_key(record_id)
        try:
            self._collection(table).insert(
                doc, overwrite=True, overwrite_mode="update", silent=True,
            )
        except self._errors as e:
            raise StoreError(f"merge {table}:{record_id}: {e}") from e

    async def relate(
        self,
        from_table: str,
        from_id: str,
        edge: str,
        to_table: str,
        to_id: str,
        data: Mapping[str, Any] | None = None,
    ) -> None:
        src = self._doc_id(from_table, from_id)
        dst = self._doc_id(to_table, to_id)
        doc = dict(data or {})
        doc["_key"] = self._edge_key(edge, src, dst)
        doc["_from"] = src
        doc["_to"] = dst
        try:
            self._collection(edge, edge=True).insert(
                doc, overwrite=True, overwrite_mode="replace", silent=True,
            )
        except self._errors as e:
            raise StoreError(f"relate {src}->{edge}->{dst}: {e}") from e

    async def query(self, statement: str, params: Mapping[str, Any] | None = None) -> list[Any]:
        try:
            cursor = self._db.aql.execute(statement, bind_vars=dict(params or {}))
            return list(cursor)
        except self._errors as e:
            raise StoreError(f"query failed: {e}") from e

    @property
    def provider_name(self) -> str:
        return "arangodb"
