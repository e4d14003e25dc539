# backend/docchunker/core/chunker.py
"""
Sliding-window chunker: splits a token sequence into overlapping chunks of at
most chunk_size tokens. Each chunk after the first starts overlap_size tokens
before the previous chunk's end.

Produces Chunk records numbered 1..N with inclusive token bounds.
"""
from dataclasses import asdict, dataclass
from typing import List, Sequence

from docchunker.core.tokenizer import detokenize, tokenize


@dataclass(frozen=True)
class Chunk:
    id: int
    text: str
    token_count: int
    start_token: int
    end_token: int  # inclusive
    is_last_chunk: bool

    def to_dict(self) -> dict:
        return asdict(self)


def chunk_tokens(tokens: Sequence[str], chunk_size: int = 400, overlap_size: int = 25) -> List[Chunk]:
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    if overlap_size < 0:
        raise ValueError(f"overlap_size must be >= 0, got {overlap_size}")

    chunks: List[Chunk] = []
    total = len(tokens)
    start = 0
    chunk_number = 1
    while start < total:
        end = min(start + chunk_size, total)
        is_last = end >= total
        chunks.append(
            Chunk(
                id=chunk_number,
                text=detokenize(tokens[start:end]),
                token_count=end - start,
                start_token=start,
                end_token=end - 1,
                is_last_chunk=is_last,
            )
        )
        if is_last:
            break
        next_start = end - overlap_size
        # overlap >= window: fall back to a non-overlapping step so the window always advances
        if next_start <= start:
            next_start = end
        start = next_start
        chunk_number += 1
    return chunks


def chunk_text(text: str, chunk_size: int = 400, overlap_size: int = 25) -> List[Chunk]:
    return chunk_tokens(tokenize(text), chunk_size=chunk_size, overlap_size=overlap_size)
