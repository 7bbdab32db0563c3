# src/rag/graph_store/schema.py — v1
"""Table and edge names written by the indexing pipeline."""

from __future__ import annotations

# Document tables
WORKSPACE = "workspace"
DIRECTORY = "directory"
FILE = "file"
VECTOR_MODEL = "vector_model"
VECTOR_CHUNK = "vector_chunk"
WORKSPACE_VECTOR = "workspace_vector"

# Edges
WS_CONTAINS_DIR = "ws_contains_dir"
DIR_CONTAINS_DIR = "dir_contains_dir"
DIR_CONTAINS_FILE = "dir_contains_file"
FILE_HAS_VECTOR = "file_has_vector"
WORKSPACE_HAS_VECTOR = "workspace_has_vector"
