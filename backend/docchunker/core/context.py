# backend/docchunker/core/context.py
"""
Turns a chunk selection into the grounding context of a chat turn.

Blocks look like "[Chunk 3]: <text>" and are separated by a blank line,
always in ascending chunk id order whatever order the ids were selected in.
"""
from typing import Dict, Iterable, List, Tuple

from docchunker.core.chunker import Chunk
from docchunker.core.errors import EmptySelectionError
from docchunker.core.store import Document

SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions based on the provided document chunks.\n"
    "Only use the information from the provided chunks to answer questions.\n"
    "If the answer cannot be found in the chunks, say so clearly.\n"
    "Be concise and accurate in your responses."
)

USER_TEMPLATE = (
    "Context from document chunks:\n"
    "{context}\n"
    "\n"
    "---\n"
    "\n"
    "User Question: {question}\n"
    "\n"
    "Please answer based on the context provided above."
)


def validate_selection(selected_ids: Iterable[int]) -> None:
    if not set(selected_ids):
        raise EmptySelectionError()


def _render(blocks: Iterable[Tuple[int, str]]) -> str:
    return "\n\n".join(f"[Chunk {chunk_id}]: {text}" for chunk_id, text in blocks)


def select_chunks(document: Document, selected_ids: Iterable[int]) -> List[Chunk]:
    """Chunks of `document` whose id is selected, in ascending id order."""
    wanted = set(selected_ids)
    validate_selection(wanted)
    picked = [c for c in document.chunks if c.id in wanted]
    if not picked:
        raise EmptySelectionError("None of the selected chunks belong to this document")
    return picked


def build_context(document: Document, selected_ids: Iterable[int]) -> str:
    """
    Render the chunks of `document` whose id is selected.
    Raises EmptySelectionError if no chunk of the document matches.
    """
    return _render((c.id, c.text) for c in select_chunks(document, selected_ids))


def build_context_from_chunks(chunks: Iterable[Tuple[int, str]]) -> str:
    """Same rendering for (id, text) pairs posted by the client."""
    by_id: Dict[int, str] = {}
    for chunk_id, text in chunks:
        by_id.setdefault(chunk_id, text)
    validate_selection(by_id)
    return _render(sorted(by_id.items()))


def build_prompt(context: str, question: str) -> List[dict]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": USER_TEMPLATE.format(context=context, question=question)},
    ]
