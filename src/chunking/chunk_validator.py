# src/chunking/chunk_validator.py — v2
"""Segment validation ensuring the chunker's postconditions.

Validates:
- First segment starts at byte 0, last segment ends at the source length
- Adjacent segments are contiguous and non-overlapping
- Token counts are positive and within the budget
- Concatenated segment text reproduces the source exactly
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from wsindex.chunking.token_chunker import TokenSegment


@dataclass
class ValidationResult:
    """Result of segment validation."""

    valid: bool = True
    errors: list[str] = field(default_factory=list)


def validate_segments(
    segments: Sequence[TokenSegment],
    source: bytes,
    max_tokens: int,
) -> ValidationResult:
    """Check ordering, contiguity, token budget and lossless reconstruction.

    Args:
        segments: Segments in index order.
        source: UTF-8 bytes of the text that was chunked.
        max_tokens: Token budget per segment.

    Returns:
        ValidationResult with one error string per violated constraint.
    """
    result = ValidationResult()

    if not segments:
        if source:
            result.valid = False
            result.errors.append(f"no segments for {len(source)} source bytes")
        return result

    if segments[0].start != 0:
        result.valid = False
        result.errors.append(f"first segment starts at {segments[0].start}, expected 0")
    if segments[-1].end != len(source):
        result.valid = False
        result.errors.append(
            f"last segment ends at {segments[-1].end}, expected {len(source)}"
        )

    for i, seg in enumerate(segments):
        if seg.end <= seg.start:
            result.valid = False
            result.errors.append(f"segment {i} is empty ({seg.start}..{seg.end})")
        if not 0 < seg.token_count <= max_tokens:
            result.valid = False
            result.errors.append(
                f"segment {i} token count {seg.token_count} outside 1..{max_tokens}"
            )
        if i > 0 and segments[i - 1].end != seg.start:
            result.valid = False
            result.errors.append(
                f"segment {i} starts at {seg.start}, previous ended at {segments[i - 1].end}"
            )

    rebuilt = "".join(seg.text for seg in segments).encode("utf-8")
    if rebuilt != source:
        result.valid = False
        result.errors.append("concatenated segments do not reproduce the source text")

    return result
