# tests/unit/rag/graph_store/test_unit_graph_stores.py — v3
"""Tests for the ArangoDB store adapter and the store factory."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock

import pytest

from wsindex.core.addressing import hash_string
from wsindex.core.errors import StoreError
from wsindex.rag.graph_store.arangodb_store import ArangoDBStore
from wsindex.rag.graph_store.graph_store_factory import (
    UnsupportedGraphStoreError,
    create_graph_store,
)


@pytest.fixture
def db():
    db = MagicMock()
    db.has_collection.return_value = False
    return db


class TestArangoDBStore:
    def test_import_error(self):
        mod = sys.modules.get("arango")
        sys.modules["arango"] = None  # type: ignore[assignment]
        try:
            with pytest.raises(ImportError, match="python-arango"):
                ArangoDBStore()
        finally:
            if mod is not None:
                sys.modules["arango"] = mod
            else:
                sys.modules.pop("arango", None)

    def test_provider_name(self, db):
        assert ArangoDBStore(db=db).provider_name == "arangodb"

    @pytest.mark.asyncio
    async def test_upsert_replaces(self, db):
        store = ArangoDBStore(db=db)
        await store.upsert("file", "file-abc", {"relpath": "a.py"})
        db.create_collection.assert_called_once_with("file", edge=False)
        db.collection.return_value.insert.assert_called_once_with(
            {"relpath": "a.py", "_key": "file-abc"},
            overwrite=True, overwrite_mode="replace", silent=True,
        )

    @pytest.mark.asyncio
    async def test_merge_updates(self, db):
        store = ArangoDBStore(db=db)
        await store.merge("workspace", "ws 1", {"path": "/repo"})
        _, kwargs = db.collection.return_value.insert.call_args
        assert kwargs["overwrite_mode"] == "update"
        doc = db.collection.return_value.insert.call_args.args[0]
        assert doc["_key"] == "ws%201"

    @pytest.mark.asyncio
    async def test_collection_created_once(self, db):
        store = ArangoDBStore(db=db)
        await store.upsert("file", "a", {})
        await store.upsert("file", "b", {})
        assert db.create_collection.call_count == 1

    @pytest.mark.asyncio
    async def test_existing_collection_not_created(self, db):
        db.has_collection.return_value = True
        await ArangoDBStore(db=db).upsert("file", "a", {})
        db.create_collection.assert_not_called()

    @pytest.mark.asyncio
    async def test_relate_deterministic_key(self, db):
        store = ArangoDBStore(db=db)
        await store.relate("directory", "dir-1", "dir_contains_file", "file", "file-2")
        await store.relate("directory", "dir-1", "dir_contains_file", "file", "file-2")
        db.create_collection.assert_called_once_with("dir_contains_file", edge=True)
        first, second = db.collection.return_value.insert.call_args_list
        assert first == second
        doc = first.args[0]
        assert doc["_from"] == "directory/dir-1"
        assert doc["_to"] == "file/file-2"
        expected = hash_string("dir_contains_file|directory/dir-1|file/file-2")[:20]
        assert doc["_key"] == f"dir_contains_file-{expected}"

    @pytest.mark.asyncio
    async def test_relate_keys_distinguish_endpoint_case(self, db):
        store = ArangoDBStore(db=db)
        await store.relate("workspace", "WS1", "ws_contains_dir", "directory", "dir-1")
        await store.relate("workspace", "ws1", "ws_contains_dir", "directory", "dir-1")
        first, second = (c.args[0] for c in db.collection.return_value.insert.call_args_list)
        assert first["_from"] == "workspace/WS1"
        assert second["_from"] == "workspace/ws1"
        assert first["_key"] != second["_key"]

    @pytest.mark.asyncio
    async def test_doc_keys_do_not_collide(self, db):
        store = ArangoDBStore(db=db)
        for record_id in ("my ws", "my_ws", "my%20ws", "a~b"):
            await store.upsert("workspace", record_id, {})
        keys = [c.args[0]["_key"] for c in db.collection.return_value.insert.call_args_list]
        assert keys == ["my%20ws", "my_ws", "my%2520ws", "a%7Eb"]

    @pytest.mark.asyncio
    async def test_query(self, db):
        db.aql.execute.return_value = iter([{"n": 1}])
        rows = await ArangoDBStore(db=db).query("RETURN 1", {"x": 1})
        assert rows == [{"n": 1}]
        db.aql.execute.assert_called_once_with("RETURN 1", bind_vars={"x": 1})

    @pytest.mark.asyncio
    async def test_errors_wrapped(self, db):
        db.collection.return_value.insert.side_effect = OSError("connection refused")
        with pytest.raises(StoreError, match="upsert file:a"):
            await ArangoDBStore(db=db).upsert("file", "a", {})


class TestGraphStoreFactory:
    def test_arangodb(self, settings, monkeypatch):
        created = {}

        class FakeArango:
            def __init__(self, **kwargs):
                created.update(kwargs)

        monkeypatch.setattr(
            "wsindex.rag.graph_store.arangodb_store.ArangoDBStore", FakeArango,
        )
        store = create_graph_store(settings)
        assert isinstance(store, FakeArango)
        assert created["url"] == settings.arango_url
        assert created["request_timeout"] == settings.store_request_timeout

    def test_unsupported(self, settings):
        settings.store_backend = "neo4j"
        with pytest.raises(UnsupportedGraphStoreError, match="neo4j"):
            create_graph_store(settings)
