# backend/docchunker/core/config.py
import os
from pathlib import Path
from dotenv import load_dotenv
from pydantic import BaseModel, Field

BASE_DIR = Path(__file__).resolve().parents[2]  # backend/
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)


def _origins(raw: str):
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]


class Settings:
    # Azure Document Intelligence (text extraction)
    AZURE_CONTENT_UNDERSTANDING_ENDPOINT: str = os.getenv("AZURE_CONTENT_UNDERSTANDING_ENDPOINT", "").strip()
    AZURE_CONTENT_UNDERSTANDING_KEY: str = os.getenv("AZURE_CONTENT_UNDERSTANDING_KEY", "").strip()
    EXTRACTION_POLL_INTERVAL: float = float(os.getenv("EXTRACTION_POLL_INTERVAL", 2.0))
    EXTRACTION_MAX_POLLS: int = int(os.getenv("EXTRACTION_MAX_POLLS", 30))
    EXTRACTION_TIMEOUT: int = int(os.getenv("EXTRACTION_TIMEOUT", 90))

    # Azure OpenAI (chat completion)
    AZURE_OPENAI_ENDPOINT: str = os.getenv("AZURE_OPENAI_ENDPOINT", "").strip()
    AZURE_OPENAI_KEY: str = os.getenv("AZURE_OPENAI_KEY", "").strip()
    AZURE_OPENAI_DEPLOYMENT: str = os.getenv("AZURE_OPENAI_DEPLOYMENT", "").strip()
    AZURE_OPENAI_API_VERSION: str = os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview").strip()
    OPENAI_TEMPERATURE: float = float(os.getenv("OPENAI_TEMPERATURE", 0.7))
    OPENAI_MAX_TOKENS: int = int(os.getenv("OPENAI_MAX_TOKENS", 1000))
    OPENAI_TIMEOUT: int = int(os.getenv("OPENAI_TIMEOUT", 60))

    # Retry on rate limiting (1 call + 3 retries)
    RETRY_MAX_ATTEMPTS: int = int(os.getenv("RETRY_MAX_ATTEMPTS", 4))
    RETRY_BASE_DELAY: float = float(os.getenv("RETRY_BASE_DELAY", 1.0))
    RETRY_MAX_DELAY: float = float(os.getenv("RETRY_MAX_DELAY", 30.0))
    RETRY_TOTAL_TIMEOUT: float = float(os.getenv("RETRY_TOTAL_TIMEOUT", 120.0))

    # Uploads
    UPLOAD_DIR: Path = Path(os.getenv("UPLOAD_DIR", str(BASE_DIR / "uploads")))
    MAX_UPLOAD_MB: int = int(os.getenv("MAX_UPLOAD_MB", 50))

    # Chunking defaults (validated through ChunkingConfig at the request boundary)
    DEFAULT_CHUNK_SIZE: int = int(os.getenv("DEFAULT_CHUNK_SIZE", 400))
    DEFAULT_OVERLAP_SIZE: int = int(os.getenv("DEFAULT_OVERLAP_SIZE", 25))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()

    # CORS (for dev)
    ALLOW_ORIGINS = _origins(os.getenv("ALLOW_ORIGINS", "*"))

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_MB * 1024 * 1024


class ChunkingConfig(BaseModel):
    """Chunking parameters for one ingestion, checked once when the request arrives."""

    chunk_size: int = Field(default=400, ge=1)
    overlap_size: int = Field(default=25, ge=0)


# instantiate
settings = Settings()

# Ensure upload dir exists
settings.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
