# backend/docchunker/core/tokenizer.py
"""
Whitespace tokenizer. A token is a maximal run of non-whitespace characters,
so punctuation stays attached to the word next to it.
"""
import re
from typing import List, Sequence

_TOKEN_RE = re.compile(r"\S+")


def tokenize(text: str) -> List[str]:
    if not text:
        return []
    return _TOKEN_RE.findall(text)


def detokenize(tokens: Sequence[str]) -> str:
    """
    Join tokens with a single space. Not an inverse of tokenize():
    newlines and runs of spaces in the source text are lost.
    """
    return " ".join(tokens)


def count_tokens(text: str) -> int:
    return len(tokenize(text))
