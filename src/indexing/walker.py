# src/indexing/walker.py — v2
"""Deterministic workspace tree walk shared by scan and embed.

Entries are visited depth-first in name order. Noise directories are pruned
by case-insensitive name match. Symlinks and other non-regular entries are
skipped. The cancellation signal is checked before each visited entry, and
the async walk yields to the event loop between entries so the signal can be
set (or the calling task cancelled) while a long walk is running.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Iterable, Iterator

from wsindex.core.errors import WalkCancelledError, WalkError

DEFAULT_SKIP_DIRS: frozenset[str] = frozenset(
    {".git", ".hg", ".svn", "node_modules", ".idea", ".vscode"}
)


@dataclass(frozen=True)
class WalkEntry:
    """A directory or regular file found under the workspace root."""

    path: Path
    relpath: str
    is_dir: bool
    stat: os.stat_result


def normalize_relpath(root: Path, path: Path) -> str:
    """Workspace-relative, slash-separated path; the root itself is ``""``."""
    rel = path.relative_to(root).as_posix()
    if rel == ".":
        return ""
    return rel.removeprefix("./")


def parent_relpath(relpath: str) -> str:
    """Relative path of the containing directory (``""`` for top-level entries)."""
    if "/" not in relpath:
        return ""
    return relpath.rsplit("/", 1)[0]


def should_skip_dir(name: str, skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS) -> bool:
    lowered = name.lower()
    return any(lowered == s.lower() for s in skip_dirs)


def iter_workspace(
    root: Path,
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
    cancel: asyncio.Event | None = None,
) -> Iterator[WalkEntry]:
    """Yield the root directory, then every directory and regular file below it.

    Raises:
        WalkCancelledError: If ``cancel`` is set before an entry is visited.
        WalkError: If a directory cannot be listed or an entry cannot be stat'ed.
    """
    root = Path(root)
    skip = frozenset(s.lower() for s in skip_dirs)
    _check_cancel(cancel)
    try:
        root_stat = root.stat()
    except OSError as e:
        raise WalkError(f"walk {root}: {e}") from e
    yield WalkEntry(path=root, relpath="", is_dir=True, stat=root_stat)
    yield from _walk_dir(root, root, skip, cancel)


def _walk_dir(
    root: Path,
    directory: Path,
    skip: frozenset[str],
    cancel: asyncio.Event | None,
) -> Iterator[WalkEntry]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise WalkError(f"walk {directory}: {e}") from e

    for entry in entries:
        _check_cancel(cancel)
        path = Path(entry.path)
        try:
            if entry.is_dir(follow_symlinks=False):
                if should_skip_dir(entry.name, skip):
                    continue
                yield WalkEntry(
                    path=path,
                    relpath=normalize_relpath(root, path),
                    is_dir=True,
                    stat=entry.stat(follow_symlinks=False),
                )
                yield from _walk_dir(root, path, skip, cancel)
            elif entry.is_file(follow_symlinks=False):
                yield WalkEntry(
                    path=path,
                    relpath=normalize_relpath(root, path),
                    is_dir=False,
                    stat=entry.stat(follow_symlinks=False),
                )
        except OSError as e:
            raise WalkError(f"walk {path}: {e}") from e


def _check_cancel(cancel: asyncio.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise WalkCancelledError("workspace walk cancelled")


async def walk_workspace(
    root: Path,
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
    cancel: asyncio.Event | None = None,
) -> AsyncIterator[WalkEntry]:
    """Async form of :func:`iter_workspace` with a suspension point per entry."""
    for entry in iter_workspace(root, skip_dirs, cancel):
        yield entry
        await asyncio.sleep(0)
