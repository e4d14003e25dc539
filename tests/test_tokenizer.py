"""Tests for docchunker.core.tokenizer."""

from docchunker.core.tokenizer import count_tokens, detokenize, tokenize


def test_splits_on_whitespace_runs():
    assert tokenize("alpha  beta\tgamma\n\ndelta") == ["alpha", "beta", "gamma", "delta"]


def test_punctuation_stays_attached():
    assert tokenize("Hello, world! (see p. 3)") == ["Hello,", "world!", "(see", "p.", "3)"]


def test_empty_and_blank_input():
    assert tokenize("") == []
    assert tokenize("   \n\t ") == []


def test_no_normalization():
    assert tokenize("Ärger ÄRGER") == ["Ärger", "ÄRGER"]


def test_detokenize_is_lossy():
    text = "line one\n\nline   two"
    assert detokenize(tokenize(text)) == "line one line two"


def test_detokenize_empty():
    assert detokenize([]) == ""


def test_count_tokens():
    assert count_tokens(" a b  c ") == 3
    assert count_tokens("") == 0
