# tests/unit/core/test_addressing.py — v1
"""Tests for core/addressing.py — identifiers and content digests."""

from __future__ import annotations

import hashlib
import re

from wsindex.core.addressing import (
    dir_id,
    file_id,
    hash_bytes,
    hash_file,
    hash_string,
    hex_id,
    vector_chunk_id,
    workspace_vector_id,
)


class TestHexId:
    def test_format(self):
        assert re.fullmatch(r"file-[0-9a-f]{20}", hex_id("file", "ws", "README.md"))

    def test_known_value(self):
        expected = hashlib.sha256(b"ws|readme.md").hexdigest()[:20]
        assert hex_id("file", "ws", "README.md") == f"file-{expected}"

    def test_case_and_whitespace_insensitive(self):
        assert hex_id("dir", "  WS ", "Src") == hex_id("dir", "ws", "src")

    def test_order_matters(self):
        assert hex_id("x", "a", "b") != hex_id("x", "b", "a")

    def test_deterministic(self):
        assert file_id("ws", "a/b.py") == file_id("ws", "a/b.py")

    def test_prefixes(self):
        assert file_id("ws", "a").startswith("file-")
        assert dir_id("ws", "a").startswith("dir-")
        assert vector_chunk_id("ws", "file-1", "chunk", 0).startswith("vec-")
        assert workspace_vector_id("ws", "model", "centroid@file").startswith("wsv-")

    def test_file_and_dir_ids_differ_for_same_path(self):
        assert file_id("ws", "a") != dir_id("ws", "a")

    def test_chunk_index_changes_id(self):
        assert vector_chunk_id("ws", "f", "chunk", 0) != vector_chunk_id("ws", "f", "chunk", 1)

    def test_workspace_scoping(self):
        assert file_id("ws1", "a.py") != file_id("ws2", "a.py")


class TestContentHashes:
    def test_full_length_hex(self):
        assert re.fullmatch(r"[0-9a-f]{64}", hash_bytes(b"data"))

    def test_deterministic(self):
        assert hash_bytes(b"same bytes") == hash_bytes(b"same bytes")

    def test_single_byte_flip_detected(self):
        data = bytearray(b"The quick brown fox jumps over the lazy dog")
        original = hash_bytes(bytes(data))
        for i in range(len(data)):
            flipped = bytearray(data)
            flipped[i] ^= 0x01
            assert hash_bytes(bytes(flipped)) != original

    def test_hash_string_is_utf8_bytes(self):
        assert hash_string("héllo") == hash_bytes("héllo".encode("utf-8"))

    def test_hash_file_matches_bytes(self, tmp_path):
        payload = b"x" * 200_000 + b"tail"
        path = tmp_path / "big.bin"
        path.write_bytes(payload)
        assert hash_file(path) == hash_bytes(payload)

    def test_hash_empty_file(self, tmp_path):
        path = tmp_path / "empty"
        path.write_bytes(b"")
        assert hash_file(path) == hashlib.sha256(b"").hexdigest()
