# src/indexing/languages.py — v1
"""Extension-based language hints for scanned files."""

from __future__ import annotations

from pathlib import PurePath

EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ".go": "go",
    ".py": "python",
    ".rs": "rust",
    ".js": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".jsx": "jsx",
    ".sh": "shell",
    ".bash": "shell",
    ".ps1": "powershell",
    ".md": "markdown",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
}

FALLBACK_LANGUAGE = "text"


def detect_language(path: str | PurePath) -> str:
    """Return a language hint from the file extension.

    Unknown extensions map to the extension itself without its dot; files
    without an extension map to ``"text"``.
    """
    ext = PurePath(path).suffix.lower()
    if not ext:
        return FALLBACK_LANGUAGE
    return EXTENSION_TO_LANGUAGE.get(ext, ext.removeprefix("."))
