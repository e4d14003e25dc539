# models.py
"""
Wire models. Field names are snake_case in Python and camelCase on the wire
(fileId, totalTokens, startToken, ...), matching the browser client.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from docchunker.core.chunker import Chunk
from docchunker.core.session import ChatMessage, ChatSession
from docchunker.core.store import Document, DocumentSummary


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ChunkOut(WireModel):
    id: int
    text: str
    token_count: int = Field(alias="tokenCount")
    start_token: int = Field(alias="startToken")
    end_token: int = Field(alias="endToken")
    is_last_chunk: bool = Field(alias="isLastChunk")

    @classmethod
    def from_chunk(cls, chunk: Chunk) -> "ChunkOut":
        return cls(
            id=chunk.id,
            text=chunk.text,
            token_count=chunk.token_count,
            start_token=chunk.start_token,
            end_token=chunk.end_token,
            is_last_chunk=chunk.is_last_chunk,
        )


class UploadResponse(WireModel):
    success: bool = True
    file_id: str = Field(alias="fileId")
    filename: str
    total_tokens: int = Field(alias="totalTokens")
    chunk_count: int = Field(alias="chunkCount")
    chunk_size: int = Field(alias="chunkSize")
    overlap_size: int = Field(alias="overlapSize")
    chunks: List[ChunkOut]

    @classmethod
    def from_document(cls, doc: Document) -> "UploadResponse":
        return cls(
            file_id=doc.id,
            filename=doc.filename,
            total_tokens=doc.total_tokens,
            chunk_count=doc.chunk_count,
            chunk_size=doc.chunk_size,
            overlap_size=doc.overlap_size,
            chunks=[ChunkOut.from_chunk(c) for c in doc.chunks],
        )


class DocumentDetail(WireModel):
    file_id: str = Field(alias="fileId")
    filename: str
    original_text: str = Field(alias="originalText")
    total_tokens: int = Field(alias="totalTokens")
    chunk_size: int = Field(alias="chunkSize")
    overlap_size: int = Field(alias="overlapSize")
    chunks: List[ChunkOut]
    upload_time: datetime = Field(alias="uploadTime")

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentDetail":
        return cls(
            file_id=doc.id,
            filename=doc.filename,
            original_text=doc.full_text,
            total_tokens=doc.total_tokens,
            chunk_size=doc.chunk_size,
            overlap_size=doc.overlap_size,
            chunks=[ChunkOut.from_chunk(c) for c in doc.chunks],
            upload_time=doc.created_at,
        )


class DocumentSummaryOut(WireModel):
    file_id: str = Field(alias="fileId")
    filename: str
    total_tokens: int = Field(alias="totalTokens")
    chunk_count: int = Field(alias="chunkCount")
    upload_time: datetime = Field(alias="uploadTime")

    @classmethod
    def from_summary(cls, summary: DocumentSummary) -> "DocumentSummaryOut":
        return cls(
            file_id=summary.id,
            filename=summary.filename,
            total_tokens=summary.total_tokens,
            chunk_count=summary.chunk_count,
            upload_time=summary.created_at,
        )


class DeleteResponse(BaseModel):
    success: bool = True
    message: str = "Document deleted"


class ChunkRef(BaseModel):
    id: int
    text: str = ""


class ChatRequest(WireModel):
    message: str = ""
    chunks: List[ChunkRef] = []
    chunk_ids: Optional[List[int]] = Field(default=None, alias="chunkIds")
    document_id: Optional[str] = Field(default=None, alias="documentId")
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class ChatResponse(WireModel):
    success: bool = True
    response: str
    chunks_used: int = Field(alias="chunksUsed")


class SelectionRequest(WireModel):
    document_id: Optional[str] = Field(default=None, alias="documentId")
    chunk_ids: List[int] = Field(default=[], alias="chunkIds")


class ChatMessageOut(WireModel):
    role: str
    content: str
    timestamp: datetime
    document_id: Optional[str] = Field(default=None, alias="documentId")

    @classmethod
    def from_message(cls, msg: ChatMessage) -> "ChatMessageOut":
        return cls(role=msg.role, content=msg.content, timestamp=msg.timestamp, document_id=msg.document_id)


class SessionOut(WireModel):
    session_id: str = Field(alias="sessionId")
    document_id: Optional[str] = Field(default=None, alias="documentId")
    selected_chunk_ids: List[int] = Field(alias="selectedChunkIds")
    messages: List[ChatMessageOut]

    @classmethod
    def from_session(cls, session: ChatSession) -> "SessionOut":
        return cls(
            session_id=session.session_id,
            document_id=session.document_id,
            selected_chunk_ids=session.selected_ids(),
            messages=[ChatMessageOut.from_message(m) for m in session.messages],
        )
