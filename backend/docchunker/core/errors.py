# backend/docchunker/core/errors.py
"""
Error hierarchy for the document chunker.

    DocChunkerError
    ├── ValidationError
    │   └── EmptySelectionError
    ├── NotFoundError
    ├── IngestionError
    └── UpstreamServiceError
        ├── ExtractionError
        └── CompletionServiceError
            ├── CompletionAuthError
            ├── CompletionNotFoundError
            └── CompletionRateLimitError

Caller mistakes (validation, not-found, empty selection) are never retried.
Only upstream errors flagged as rate limited go through the retry helper.
"""
from typing import Optional


class DocChunkerError(Exception):
    def __init__(self, message: str = "Document chunker error", details: Optional[str] = None):
        self.message = message
        self.details = details
        full_message = message
        if details:
            full_message = f"{message} | Details: {details}"
        super().__init__(full_message)


class ValidationError(DocChunkerError):
    """Bad input from the caller: wrong file type, missing fields, bad chunk config."""


class EmptySelectionError(ValidationError):
    def __init__(self, message: str = "Message and selected chunks are required"):
        super().__init__(message)


class NotFoundError(DocChunkerError):
    def __init__(self, document_id: str, message: str = "Document not found"):
        self.document_id = document_id
        super().__init__(message, details=document_id)


class IngestionError(DocChunkerError):
    """Tokenizing, chunking or registering a document failed."""


class UpstreamServiceError(DocChunkerError):
    """
    Failure reported by an external collaborator (text extraction, completion).

    Attributes:
        status_code: HTTP status returned by the service, if any
    """

    def __init__(
        self,
        message: str = "Upstream service error",
        status_code: Optional[int] = None,
        details: Optional[str] = None,
    ):
        self.status_code = status_code
        super().__init__(message, details)


class ExtractionError(UpstreamServiceError):
    pass


class CompletionServiceError(UpstreamServiceError):
    pass


class CompletionAuthError(CompletionServiceError):
    def __init__(self, details: Optional[str] = None):
        super().__init__(
            "Azure OpenAI authentication failed. Check your API key.",
            status_code=401,
            details=details,
        )


class CompletionNotFoundError(CompletionServiceError):
    def __init__(self, details: Optional[str] = None):
        super().__init__(
            "Azure OpenAI deployment not found. Check your endpoint and deployment name.",
            status_code=404,
            details=details,
        )


class CompletionRateLimitError(CompletionServiceError):
    def __init__(self, details: Optional[str] = None):
        super().__init__(
            "Azure OpenAI rate limit exceeded. Try again shortly.",
            status_code=429,
            details=details,
        )


def is_rate_limited(error: BaseException) -> bool:
    return isinstance(error, UpstreamServiceError) and error.status_code == 429
