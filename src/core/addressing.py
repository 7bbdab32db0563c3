# src/core/addressing.py — v1
"""Content addressing: stable identifiers and content digests.

Record identifiers are derived from ordered string tuples so that repeated
scans and embeddings upsert the same keys instead of inserting duplicates.
Content digests are full-length SHA-256 hex strings over raw bytes.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

ID_SEPARATOR = b"|"
ID_DIGEST_BYTES = 10

FILE_PREFIX = "file"
DIR_PREFIX = "dir"
VECTOR_PREFIX = "vec"
WORKSPACE_VECTOR_PREFIX = "wsv"

_READ_BLOCK = 65536


def hex_id(prefix: str, *parts: str) -> str:
    """Build ``<prefix>-<hex>`` from case/whitespace-normalized parts.

    Each part is stripped and lowercased, the parts are joined with ``|`` and
    hashed with SHA-256; the first 10 digest bytes are hex-encoded.
    """
    joined = ID_SEPARATOR.join(p.strip().lower().encode("utf-8") for p in parts)
    digest = hashlib.sha256(joined).digest()
    return f"{prefix}-{digest[:ID_DIGEST_BYTES].hex()}"


def file_id(workspace_id: str, relpath: str) -> str:
    return hex_id(FILE_PREFIX, workspace_id, relpath)


def dir_id(workspace_id: str, relpath: str) -> str:
    return hex_id(DIR_PREFIX, workspace_id, relpath)


def vector_chunk_id(workspace_id: str, owner_file_id: str, granularity: str, index: int) -> str:
    return hex_id(VECTOR_PREFIX, workspace_id, owner_file_id, granularity, str(index))


def workspace_vector_id(workspace_id: str, model_slug: str, kind: str) -> str:
    return hex_id(WORKSPACE_VECTOR_PREFIX, workspace_id, model_slug, kind)


def hash_bytes(data: bytes) -> str:
    """Full SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def hash_string(value: str) -> str:
    """Full SHA-256 hex digest of a UTF-8 string."""
    return hash_bytes(value.encode("utf-8"))


def hash_file(path: Path | str) -> str:
    """Stream a file through SHA-256 and return the full hex digest."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        while block := f.read(_READ_BLOCK):
            h.update(block)
    return h.hexdigest()
