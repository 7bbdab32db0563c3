# src/core/errors.py — v1
"""Exception hierarchy for the indexing pipeline.

Validation errors never enter a run. Every other error is caught per step by
the coordinator, recorded as a risk on the RunReport and re-raised wrapped in
StepFailedError so the caller receives both the report and the cause.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wsindex.core.models import RunReport


class IndexerError(Exception):
    """Base class for all pipeline errors."""


class RequestValidationError(IndexerError):
    """Request fields missing or workspace root unusable."""


class ArtifactError(IndexerError):
    """Artifact directory or NDJSON evidence file could not be written."""


class WalkError(IndexerError):
    """Tree walk or file hashing failed (permission denied, vanished path)."""


class WalkCancelledError(IndexerError):
    """Cancellation was signalled while walking the workspace."""


class TokenizerLoadError(IndexerError):
    """The configured tokenizer identifier could not be resolved."""


class ChunkAlignmentError(IndexerError):
    """Decoded chunk text could not be located in the source text."""


class EmbeddingError(IndexerError):
    """Embedding executor failed or returned an unusable response."""


class StoreError(IndexerError):
    """Storage backend rejected or failed a write or query."""


class NothingToEmbedError(IndexerError):
    """No eligible files were discovered for embedding."""


class NativeDimensionError(IndexerError):
    """No vector was available to determine the native dimension."""


class StepFailedError(IndexerError):
    """A pipeline step failed; ``report`` holds the failed RunReport."""

    def __init__(self, message: str, report: RunReport) -> None:
        super().__init__(message)
        self.report = report
