"""Tests for docchunker.core.context — context assembly from selected chunks."""

import pytest

from docchunker.core.context import (
    SYSTEM_PROMPT,
    build_context,
    build_context_from_chunks,
    build_prompt,
    select_chunks,
    validate_selection,
)
from docchunker.core.errors import EmptySelectionError, ValidationError


@pytest.fixture
def small_document(store):
    # 7 tokens, size 3, overlap 1 -> "a b c", "c d e", "e f g"
    return store.create("letters.pdf", "a b c d e f g", chunk_size=3, overlap_size=1)


def test_validate_selection():
    validate_selection({1})
    with pytest.raises(EmptySelectionError):
        validate_selection(set())


def test_empty_selection_is_validation_error():
    assert issubclass(EmptySelectionError, ValidationError)


def test_build_context_orders_by_chunk_id(small_document):
    context = build_context(small_document, [3, 1])
    assert context == "[Chunk 1]: a b c\n\n[Chunk 3]: e f g"


def test_selection_order_is_irrelevant(small_document):
    assert build_context(small_document, [2, 3, 1]) == build_context(small_document, {1, 2, 3})


def test_build_context_ignores_unknown_ids(small_document):
    assert build_context(small_document, {2, 99}) == "[Chunk 2]: c d e"


def test_build_context_empty_selection(small_document):
    with pytest.raises(EmptySelectionError):
        build_context(small_document, set())


def test_build_context_no_matching_ids(small_document):
    with pytest.raises(EmptySelectionError):
        build_context(small_document, {42})


def test_select_chunks_returns_chunks(small_document):
    picked = select_chunks(small_document, [3, 2])
    assert [c.id for c in picked] == [2, 3]


def test_build_context_from_posted_chunks():
    context = build_context_from_chunks([(5, "five"), (2, "two"), (5, "again")])
    assert context == "[Chunk 2]: two\n\n[Chunk 5]: five"


def test_build_context_from_no_chunks():
    with pytest.raises(EmptySelectionError):
        build_context_from_chunks([])


def test_build_prompt():
    messages = build_prompt("[Chunk 1]: a b c", "What is {this}?")
    assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
    user = messages[1]
    assert user["role"] == "user"
    assert user["content"].startswith("Context from document chunks:\n[Chunk 1]: a b c\n")
    assert "User Question: What is {this}?" in user["content"]
