# src/chunking/token_chunker.py — v1
"""Token-aware chunking with a byte-pair-encoding tokenizer.

The text is encoded once and split into windows of at most
``max_tokens_per_chunk`` tokens. Each window is decoded back to bytes and
aligned against a byte cursor over the UTF-8 source; when the decoded bytes
are not found at the cursor the cursor is realigned to the next occurrence.
The resulting segments are checked against the chunker's postconditions
before they are returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

import tiktoken

from wsindex.chunking.chunk_validator import validate_segments
from wsindex.core.errors import ChunkAlignmentError, TokenizerLoadError

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS_PER_CHUNK = 768
_TOKENIZER_PREFIX = "tiktoken/"


class Encoding(Protocol):
    """Subset of ``tiktoken.Encoding`` used by the chunker."""

    def encode(self, text: str, *, disallowed_special: Sequence[str] = ...) -> list[int]: ...

    def decode_bytes(self, tokens: Sequence[int]) -> bytes: ...


@dataclass(frozen=True)
class TokenSegment:
    """One chunk of text with its UTF-8 byte range."""

    text: str
    start: int
    end: int
    token_count: int


def load_encoding(tokenizer_id: str) -> tiktoken.Encoding:
    """Resolve a tokenizer id (``cl100k_base``, ``tiktoken/cl100k_base`` or a model name).

    Raises:
        TokenizerLoadError: If the id is empty or cannot be resolved.
    """
    ident = tokenizer_id.strip()
    if not ident:
        raise TokenizerLoadError("tokenizer id is required")
    ident = ident.removeprefix(_TOKENIZER_PREFIX)
    try:
        return tiktoken.get_encoding(ident)
    except ValueError:
        pass
    except Exception as e:
        raise TokenizerLoadError(f"load tokenizer {tokenizer_id}: {e}") from e
    try:
        return tiktoken.encoding_for_model(ident)
    except Exception as e:
        raise TokenizerLoadError(f"load tokenizer {tokenizer_id}: {e}") from e


def _is_utf8(data: bytes) -> bool:
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


class TokenChunker:
    """Split text into contiguous, token-bounded, losslessly joinable segments."""

    def __init__(
        self,
        encoding: Encoding,
        max_tokens_per_chunk: int = DEFAULT_MAX_TOKENS_PER_CHUNK,
    ) -> None:
        if max_tokens_per_chunk <= 0:
            raise ValueError("max_tokens_per_chunk must be > 0")
        self._enc = encoding
        self._max_tokens = max_tokens_per_chunk

    @classmethod
    def from_tokenizer_id(
        cls,
        tokenizer_id: str,
        max_tokens_per_chunk: int = DEFAULT_MAX_TOKENS_PER_CHUNK,
    ) -> TokenChunker:
        return cls(load_encoding(tokenizer_id), max_tokens_per_chunk)

    @property
    def max_tokens_per_chunk(self) -> int:
        return self._max_tokens

    def chunk(self, text: str) -> list[TokenSegment]:
        """Split ``text`` into segments.

        Raises:
            ChunkAlignmentError: If a decoded window cannot be located at or
                after the cursor, or the postconditions do not hold.
        """
        tokens = self._enc.encode(text, disallowed_special=())
        if not tokens:
            return []

        source = text.encode("utf-8")
        segments: list[TokenSegment] = []
        cursor = 0
        pos = 0
        while pos < len(tokens):
            stop = min(pos + self._max_tokens, len(tokens))
            window_end, piece = self._decode_window(tokens, pos, stop)
            token_count = window_end - pos
            pos = window_end
            if not piece:
                continue

            start = cursor
            end = cursor + len(piece)
            if source[cursor:end] != piece:
                idx = source.find(piece, cursor)
                if idx == -1:
                    raise ChunkAlignmentError(
                        f"token chunk alignment failed at byte {cursor}"
                    )
                # Skipped bytes stay in this segment so segments remain contiguous.
                logger.warning(
                    "Realigned chunk cursor from byte %d to %d", cursor, idx,
                )
                end = idx + len(piece)

            segments.append(
                TokenSegment(
                    text=self._slice(source, start, end),
                    start=start,
                    end=end,
                    token_count=token_count,
                )
            )
            cursor = end

        if segments and cursor < len(source):
            logger.warning(
                "Folding %d trailing bytes into the last chunk", len(source) - cursor,
            )
            last = segments[-1]
            segments[-1] = TokenSegment(
                text=self._slice(source, last.start, len(source)),
                start=last.start,
                end=len(source),
                token_count=last.token_count,
            )

        check = validate_segments(segments, source, self._max_tokens)
        if not check.valid:
            raise ChunkAlignmentError("; ".join(check.errors))
        return segments

    def _decode_window(self, tokens: Sequence[int], pos: int, stop: int) -> tuple[int, bytes]:
        """Decode the longest window ``tokens[pos:end]`` (end <= stop) ending on a UTF-8 boundary.

        A byte-level token can carry part of a multi-byte character; such
        trailing tokens are pushed into the next window.
        """
        for end in range(stop, pos, -1):
            piece = self._enc.decode_bytes(tokens[pos:end])
            if _is_utf8(piece):
                return end, piece
        raise ChunkAlignmentError(
            f"no UTF-8 character boundary within tokens {pos}..{stop}"
        )

    @staticmethod
    def _slice(source: bytes, start: int, end: int) -> str:
        try:
            return source[start:end].decode("utf-8")
        except UnicodeDecodeError as e:
            raise ChunkAlignmentError(
                f"chunk byte range {start}..{end} splits a character"
            ) from e
