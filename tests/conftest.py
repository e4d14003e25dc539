"""
Pytest fixtures for the document chunker tests.
"""

import os
import tempfile

# Settings are read at import time; keep uploads out of the source tree
# and make sure no real Azure endpoint is configured.
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="docchunker-uploads-"))
for _name in (
    "AZURE_CONTENT_UNDERSTANDING_ENDPOINT",
    "AZURE_CONTENT_UNDERSTANDING_KEY",
    "AZURE_OPENAI_ENDPOINT",
    "AZURE_OPENAI_KEY",
    "AZURE_OPENAI_DEPLOYMENT",
):
    os.environ[_name] = ""

import pytest
from fastapi.testclient import TestClient

from docchunker.core.session import SessionRegistry
from docchunker.core.store import DocumentStore


def words(n: int) -> str:
    return " ".join(f"w{i}" for i in range(n))


class FakeExtractor:
    def __init__(self, text: str = "", error: Exception = None):
        self.text = text
        self.error = error
        self.calls = []

    def extract(self, file_path, filename=None):
        self.calls.append((str(file_path), filename))
        if self.error:
            raise self.error
        return self.text


class FakeCompletion:
    def __init__(self, answer: str = "The answer.", error: Exception = None):
        self.answer = answer
        self.error = error
        self.calls = []

    def complete(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return self.answer


@pytest.fixture
def store():
    return DocumentStore()


@pytest.fixture
def sample_document(store):
    return store.create("report.pdf", words(1000), chunk_size=400, overlap_size=25)


@pytest.fixture
def extractor():
    return FakeExtractor(text=words(50))


@pytest.fixture
def completion():
    return FakeCompletion()


@pytest.fixture
def client(monkeypatch, extractor, completion):
    """TestClient with a fresh store and fake upstream services."""
    from docchunker.api import routes
    from docchunker.main import app

    monkeypatch.setattr(routes, "store", DocumentStore())
    monkeypatch.setattr(routes, "sessions", SessionRegistry())
    monkeypatch.setattr(routes, "extractor", extractor)
    monkeypatch.setattr(routes, "completion", completion)
    return TestClient(app)
