# src/logging/context.py — v3
"""Run context attached to every log record (workspace, run, step).

The context is one immutable snapshot held in a ContextVar, so tasks spawned
by a pipeline step inherit it and cannot leak changes back.
"""

from __future__ import annotations

import contextvars
from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class LogContext:
    workspace_id: str | None = None
    run_id: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Set fields only, for JSON log injection."""
        return {k: v for k, v in asdict(self).items() if v is not None}


_EMPTY = LogContext()
_current: contextvars.ContextVar[LogContext] = contextvars.ContextVar(
    "wsindex_log_context", default=_EMPTY
)


def get_context() -> LogContext:
    return _current.get()


def set_run_context(workspace_id: str, run_id: str, step: str | None = None) -> None:
    """Bind the context for the pipeline step about to run."""
    _current.set(LogContext(workspace_id=workspace_id, run_id=run_id, step=step))


def clear_context() -> None:
    _current.set(_EMPTY)
