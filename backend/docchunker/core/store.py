# backend/docchunker/core/store.py
"""
In-memory document store.

Each Document is built completely (tokenize -> chunk) before it is registered,
so readers never see a half-ingested document. The registry lock only guards
the dict itself; chunking runs outside it so independent uploads do not wait
on each other.
"""
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from loguru import logger

from docchunker.core.chunker import Chunk, chunk_tokens
from docchunker.core.errors import IngestionError, NotFoundError
from docchunker.core.tokenizer import tokenize
from docchunker.utils import remove_file


@dataclass(frozen=True)
class DocumentSummary:
    id: str
    filename: str
    total_tokens: int
    chunk_count: int
    created_at: datetime


@dataclass(frozen=True)
class Document:
    id: str
    filename: str
    full_text: str
    total_tokens: int
    chunk_size: int
    overlap_size: int
    chunks: Tuple[Chunk, ...]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source_path: Optional[Path] = None

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)

    def get_chunk(self, chunk_id: int) -> Chunk:
        # ids are contiguous from 1
        if 1 <= chunk_id <= len(self.chunks):
            return self.chunks[chunk_id - 1]
        raise NotFoundError(self.id, message=f"Chunk {chunk_id} not found")

    def summary(self) -> DocumentSummary:
        return DocumentSummary(
            id=self.id,
            filename=self.filename,
            total_tokens=self.total_tokens,
            chunk_count=self.chunk_count,
            created_at=self.created_at,
        )


def new_document_id() -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}"


class DocumentStore:
    def __init__(self):
        self._documents: Dict[str, Document] = {}
        self._lock = threading.Lock()

    def create(
        self,
        filename: str,
        full_text: str,
        chunk_size: int,
        overlap_size: int,
        *,
        document_id: Optional[str] = None,
        source_path: Optional[Path] = None,
    ) -> Document:
        """
        Tokenize and chunk full_text, then register the result under a new id
        (or the given document_id). Returns the registered Document.
        """
        try:
            tokens = tokenize(full_text)
            chunks = chunk_tokens(tokens, chunk_size=chunk_size, overlap_size=overlap_size)
        except Exception as e:
            raise IngestionError(f"Failed to chunk '{filename}'", details=str(e)) from e

        doc = Document(
            id=document_id or new_document_id(),
            filename=filename,
            full_text=full_text,
            total_tokens=len(tokens),
            chunk_size=chunk_size,
            overlap_size=overlap_size,
            chunks=tuple(chunks),
            source_path=Path(source_path) if source_path else None,
        )
        with self._lock:
            if doc.id in self._documents:
                raise IngestionError(f"Document id already registered: {doc.id}")
            self._documents[doc.id] = doc

        logger.info(
            f"[Store] Created {doc.chunk_count} chunks for {filename} "
            f"| id={doc.id} tokens={doc.total_tokens} size={chunk_size} overlap={overlap_size}"
        )
        return doc

    def get(self, document_id: str) -> Document:
        with self._lock:
            doc = self._documents.get(document_id)
        if doc is None:
            raise NotFoundError(document_id)
        return doc

    def list(self) -> List[DocumentSummary]:
        with self._lock:
            docs = list(self._documents.values())
        return [d.summary() for d in docs]

    def delete(self, document_id: str) -> None:
        """Drop the document and remove its stored source file, if any."""
        with self._lock:
            doc = self._documents.pop(document_id, None)
        if doc is None:
            raise NotFoundError(document_id)
        if doc.source_path is not None:
            remove_file(doc.source_path)
        logger.info(f"[Store] Deleted document {document_id}")

    def __contains__(self, document_id: str) -> bool:
        with self._lock:
            return document_id in self._documents

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)
