# main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from docchunker.api.routes import router as api_router
from docchunker.core.config import settings
from docchunker.core.errors import (
    CompletionAuthError,
    CompletionNotFoundError,
    CompletionRateLimitError,
    CompletionServiceError,
    DocChunkerError,
    ExtractionError,
    IngestionError,
    NotFoundError,
    ValidationError,
)
from docchunker.core.logger import setup_logging

setup_logging(settings.LOG_LEVEL)

app = FastAPI(title="Document Chunker Backend")

# Allow frontend to call backend (dev only)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


def _status_for(exc: DocChunkerError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, CompletionAuthError):
        return 401
    if isinstance(exc, CompletionNotFoundError):
        return 404
    if isinstance(exc, CompletionRateLimitError):
        return 429
    if isinstance(exc, ExtractionError):
        return 502
    return 500


def _message_for(exc: DocChunkerError) -> str:
    if isinstance(exc, (ExtractionError, IngestionError)):
        return "Upload failed: " + exc.message
    # subtypes already carry a user-facing message
    prefix = "Failed to get response from AI: "
    if type(exc) is CompletionServiceError and not exc.message.startswith(prefix):
        return prefix + exc.message
    return exc.message


@app.exception_handler(DocChunkerError)
async def docchunker_error_handler(request: Request, exc: DocChunkerError):
    status = _status_for(exc)
    if status >= 500:
        logger.error(f"[Server] {request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"[Server] {request.method} {request.url.path} -> {status}: {exc.message}")
    return JSONResponse(status_code=status, content={"error": _message_for(exc)})


@app.get("/health")
def health():
    return {"status": "ok"}
