# tests/unit/chunking/test_chunk_validator.py — v2
"""Tests for chunking/chunk_validator.py."""

from __future__ import annotations

from wsindex.chunking.chunk_validator import validate_segments
from wsindex.chunking.token_chunker import TokenSegment

SOURCE = b"abcdef"


def _seg(text: str, start: int, end: int, tokens: int = 1) -> TokenSegment:
    return TokenSegment(text=text, start=start, end=end, token_count=tokens)


class TestValidateSegments:
    def test_valid(self):
        result = validate_segments([_seg("abc", 0, 3), _seg("def", 3, 6)], SOURCE, 4)
        assert result.valid
        assert result.errors == []

    def test_empty_source_no_segments(self):
        assert validate_segments([], b"", 4).valid

    def test_missing_segments(self):
        assert not validate_segments([], SOURCE, 4).valid

    def test_gap_detected(self):
        result = validate_segments([_seg("ab", 0, 2), _seg("def", 3, 6)], SOURCE, 4)
        assert not result.valid
        assert any("previous ended" in e for e in result.errors)

    def test_start_not_zero(self):
        result = validate_segments([_seg("bcdef", 1, 6)], SOURCE, 4)
        assert not result.valid

    def test_short_end(self):
        result = validate_segments([_seg("abc", 0, 3)], SOURCE, 4)
        assert not result.valid

    def test_over_budget(self):
        result = validate_segments([_seg("abcdef", 0, 6, tokens=5)], SOURCE, 4)
        assert not result.valid
        assert any("token count" in e for e in result.errors)

    def test_zero_token_count(self):
        result = validate_segments([_seg("abcdef", 0, 6, tokens=0)], SOURCE, 4)
        assert not result.valid

    def test_text_mismatch(self):
        result = validate_segments([_seg("abcxyz", 0, 6)], SOURCE, 4)
        assert not result.valid
        assert any("reproduce" in e for e in result.errors)
