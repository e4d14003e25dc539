# backend/docchunker/api/routes.py
from typing import List, Optional

import pydantic
from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import JSONResponse
from loguru import logger

from docchunker.api.models import (
    ChatRequest,
    ChatResponse,
    DeleteResponse,
    DocumentDetail,
    DocumentSummaryOut,
    SelectionRequest,
    SessionOut,
    UploadResponse,
)
from docchunker.core.completion import CompletionClient
from docchunker.core.config import ChunkingConfig, settings
from docchunker.core.context import build_context, build_context_from_chunks, build_prompt, select_chunks
from docchunker.core.errors import CompletionServiceError, EmptySelectionError, NotFoundError, ValidationError
from docchunker.core.extraction import DocumentExtractor
from docchunker.core.session import SessionRegistry
from docchunker.core.store import DocumentStore, new_document_id
from docchunker.utils import remove_file, safe_filename, save_bytes

router = APIRouter()

# Initialize shared resources (singleton style)
store = DocumentStore()
sessions = SessionRegistry()
extractor = DocumentExtractor()
completion = CompletionClient()


# ---------- Helpers ----------
def _parse_int(raw: Optional[str], default: int, name: str) -> int:
    if raw is None or not str(raw).strip():
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {raw!r}")


def _chunking_config(chunk_size: Optional[str], overlap_size: Optional[str]) -> ChunkingConfig:
    try:
        return ChunkingConfig(
            chunk_size=_parse_int(chunk_size, settings.DEFAULT_CHUNK_SIZE, "chunkSize"),
            overlap_size=_parse_int(overlap_size, settings.DEFAULT_OVERLAP_SIZE, "overlapSize"),
        )
    except pydantic.ValidationError as e:
        raise ValidationError("Invalid chunking parameters", details=str(e)) from e


def _is_pdf(upload: UploadFile) -> bool:
    return upload.content_type == "application/pdf" or (upload.filename or "").lower().endswith(".pdf")


def _read_limited(upload: UploadFile) -> bytes:
    limit = settings.max_upload_bytes
    data = upload.file.read(limit + 1)
    if len(data) > limit:
        raise ValidationError(f"File too large (max {settings.MAX_UPLOAD_MB}MB)")
    return data


# ---------- Documents ----------
@router.post("/upload", response_model=UploadResponse)
def upload(
    pdf_file: Optional[UploadFile] = File(None, alias="pdfFile"),
    chunk_size: Optional[str] = Form(None, alias="chunkSize"),
    overlap_size: Optional[str] = Form(None, alias="overlapSize"),
):
    if pdf_file is None or not pdf_file.filename:
        raise ValidationError("No file uploaded")
    if not _is_pdf(pdf_file):
        raise ValidationError("Only PDF files are allowed")
    config = _chunking_config(chunk_size, overlap_size)
    filename = pdf_file.filename

    document_id = f"{new_document_id()}-{safe_filename(filename)}"
    path = save_bytes(_read_limited(pdf_file), settings.UPLOAD_DIR / document_id)
    logger.info(
        f"[Upload] Processing {filename} with chunk size: {config.chunk_size}, overlap: {config.overlap_size}"
    )

    try:
        text = extractor.extract(path, filename)
        doc = store.create(
            filename,
            text,
            config.chunk_size,
            config.overlap_size,
            document_id=document_id,
            source_path=path,
        )
    except Exception:
        remove_file(path)
        raise
    return UploadResponse.from_document(doc)


@router.get("/chunks/{file_id}", response_model=DocumentDetail)
def get_chunks(file_id: str):
    return DocumentDetail.from_document(store.get(file_id))


@router.get("/documents", response_model=List[DocumentSummaryOut])
def list_documents():
    return [DocumentSummaryOut.from_summary(s) for s in store.list()]


@router.delete("/documents/{file_id}", response_model=DeleteResponse)
def delete_document(file_id: str):
    store.delete(file_id)
    sessions.forget_document(file_id)
    return DeleteResponse()


@router.get("/export/{file_id}")
def export_document(file_id: str):
    doc = store.get(file_id)
    body = DocumentDetail.from_document(doc).model_dump(by_alias=True, mode="json")
    name = doc.filename.replace('"', "")
    return JSONResponse(
        content=body,
        headers={"Content-Disposition": f'attachment; filename="{name}-chunks.json"'},
    )


# ---------- Chat ----------
def _assemble(req: ChatRequest, selected: List[int]):
    """Returns (context, chunks_used) for a chat request."""
    if req.document_id and req.document_id in store and selected:
        doc = store.get(req.document_id)
        picked = select_chunks(doc, selected)
        if req.chunks:
            missing = sorted(set(selected) - {c.id for c in picked})
            logger.debug(
                f"[Chat] Using stored text of {req.document_id} instead of posted chunk text"
                + (f"; ids not in document: {missing}" if missing else "")
            )
        return build_context(doc, selected), len(picked)
    if req.chunks:
        pairs = [(c.id, c.text) for c in req.chunks]
        return build_context_from_chunks(pairs), len({c.id for c in req.chunks})
    if req.document_id and selected:
        # bare ids can only be resolved against a stored document
        store.get(req.document_id)
    raise EmptySelectionError()


@router.post("/chat", response_model=ChatResponse)
def chat(req: ChatRequest):
    message = (req.message or "").strip()
    if not message:
        raise EmptySelectionError()

    session = sessions.get(req.session_id) if req.session_id else None
    selected = req.chunk_ids or [c.id for c in req.chunks]
    if not selected and session is not None and session.document_id == req.document_id:
        selected = session.selected_ids()

    context, used = _assemble(req, selected)
    logger.info(f"[Chat] Question on {req.document_id or 'posted chunks'} | chunks={used} | {message[:80]!r}")

    if session is not None:
        session.append("user", message, document_id=req.document_id)
    try:
        answer = completion.complete(build_prompt(context, message))
    except CompletionServiceError as e:
        logger.error(f"[Chat] Completion failed: {e}")
        if session is not None:
            session.append("error", e.message, document_id=req.document_id)
        raise
    if session is not None:
        session.append("assistant", answer, document_id=req.document_id)
    return ChatResponse(response=answer, chunks_used=used)


# ---------- Sessions ----------
@router.get("/sessions/{session_id}", response_model=SessionOut)
def get_session(session_id: str):
    session = sessions.find(session_id)
    if session is None:
        raise NotFoundError(session_id, message="Session not found")
    return SessionOut.from_session(session)


@router.put("/sessions/{session_id}/selection", response_model=SessionOut)
def set_selection(session_id: str, req: SelectionRequest):
    session = sessions.get(session_id)
    valid_ids = set(req.chunk_ids)
    if req.document_id:
        doc = store.get(req.document_id)
        valid_ids &= {c.id for c in doc.chunks}
    session.replace_selection(req.document_id, valid_ids)
    return SessionOut.from_session(session)
