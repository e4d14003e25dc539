# backend/docchunker/core/extraction.py
"""
Text extraction through Azure Document Intelligence (prebuilt-read model).

Flow: POST the file to the analyze endpoint, read the Operation-Location
header, poll it until the status leaves "running", then join every page line
with a newline. Rate-limited submits and polls are retried with backoff.
"""
import time
from pathlib import Path
from typing import Callable, Optional

import requests
from loguru import logger

from docchunker.core.config import settings
from docchunker.core.errors import ExtractionError
from docchunker.core.retry import with_backoff

ANALYZE_PATH = "formrecognizer/documentModels/prebuilt-read:analyze"
API_VERSION = "2023-07-31"


def lines_from_result(payload: dict) -> str:
    pages = (payload.get("analyzeResult") or {}).get("pages") or []
    lines = []
    for page in pages:
        for line in page.get("lines") or []:
            lines.append(line.get("content", ""))
    return "\n".join(lines).strip()


class DocumentExtractor:
    def __init__(
        self,
        endpoint: str = None,
        api_key: str = None,
        poll_interval: float = None,
        max_polls: int = None,
        timeout: int = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.endpoint = endpoint if endpoint is not None else settings.AZURE_CONTENT_UNDERSTANDING_ENDPOINT
        self.api_key = api_key if api_key is not None else settings.AZURE_CONTENT_UNDERSTANDING_KEY
        self.poll_interval = settings.EXTRACTION_POLL_INTERVAL if poll_interval is None else poll_interval
        self.max_polls = max_polls or settings.EXTRACTION_MAX_POLLS
        self.timeout = timeout or settings.EXTRACTION_TIMEOUT
        self.session = session or requests.Session()
        self._sleep = sleep

    @property
    def analyze_url(self) -> str:
        base = self.endpoint if self.endpoint.endswith("/") else self.endpoint + "/"
        return f"{base}{ANALYZE_PATH}?api-version={API_VERSION}"

    def extract(self, file_path, filename: str = None) -> str:
        """
        Return the plain text of the document at file_path.
        Raises ExtractionError on any upstream failure.
        """
        if not self.endpoint or not self.api_key:
            raise ExtractionError("Azure Document Intelligence endpoint or key not configured")
        path = Path(file_path)
        filename = filename or path.name
        logger.info(f"[Extraction] Analyzing document: {filename}")

        retrying = with_backoff(sleep=self._sleep)
        operation_url = retrying(self._submit, path, filename)
        payload = self._poll(operation_url, retrying)

        status = payload.get("status")
        if status != "succeeded":
            raise ExtractionError(f"Document analysis failed with status: {status}")
        text = lines_from_result(payload)
        logger.info(f"[Extraction] Extracted text length: {len(text)}")
        return text

    def _submit(self, path: Path, filename: str) -> str:
        try:
            with open(path, "rb") as f:
                resp = self.session.post(
                    self.analyze_url,
                    headers={"Ocp-Apim-Subscription-Key": self.api_key},
                    files={"file": (filename, f)},
                    timeout=self.timeout,
                )
        except requests.RequestException as e:
            raise ExtractionError("Azure Document Intelligence request failed", details=str(e)) from e

        if resp.status_code >= 400:
            raise ExtractionError(
                f"Azure Document Intelligence error {resp.status_code}",
                status_code=resp.status_code,
                details=resp.text[:2000],
            )
        operation_url = resp.headers.get("operation-location")
        if not operation_url:
            raise ExtractionError("No operation location received from Azure")
        return operation_url

    def _poll(self, operation_url: str, retrying) -> dict:
        payload = {}
        for attempt in range(self.max_polls):
            self._sleep(self.poll_interval)
            payload = retrying(self._fetch_status, operation_url)
            if payload.get("status") not in ("running", "notStarted"):
                return payload
            logger.debug(f"[Extraction] Still running (poll {attempt + 1}/{self.max_polls})")
        return payload

    def _fetch_status(self, operation_url: str) -> dict:
        try:
            resp = self.session.get(
                operation_url,
                headers={"Ocp-Apim-Subscription-Key": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ExtractionError("Polling Azure Document Intelligence failed", details=str(e)) from e
        if resp.status_code >= 400:
            raise ExtractionError(
                f"Azure Document Intelligence error {resp.status_code}",
                status_code=resp.status_code,
                details=resp.text[:2000],
            )
        try:
            return resp.json()
        except ValueError as e:
            raise ExtractionError("Invalid JSON from Azure Document Intelligence", details=str(e)) from e
