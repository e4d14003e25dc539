# backend/docchunker/core/completion.py
"""
Azure OpenAI chat completion client.

HTTP failures are mapped onto CompletionServiceError subtypes so the API
layer can show a specific message for auth, missing deployment and rate
limiting. Rate-limited calls are retried with backoff before giving up.
"""
import time
from typing import Callable, List, Optional

import requests
from loguru import logger

from docchunker.core.config import settings
from docchunker.core.errors import (
    CompletionAuthError,
    CompletionNotFoundError,
    CompletionRateLimitError,
    CompletionServiceError,
)
from docchunker.core.retry import with_backoff


def _error_message(resp) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:2000]
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict) and err.get("message"):
        return err["message"]
    return resp.text[:2000]


class CompletionClient:
    def __init__(
        self,
        endpoint: str = None,
        api_key: str = None,
        deployment: str = None,
        api_version: str = None,
        temperature: float = None,
        max_tokens: int = None,
        timeout: int = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.endpoint = endpoint if endpoint is not None else settings.AZURE_OPENAI_ENDPOINT
        self.api_key = api_key if api_key is not None else settings.AZURE_OPENAI_KEY
        self.deployment = deployment if deployment is not None else settings.AZURE_OPENAI_DEPLOYMENT
        self.api_version = api_version or settings.AZURE_OPENAI_API_VERSION
        self.temperature = settings.OPENAI_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or settings.OPENAI_MAX_TOKENS
        self.timeout = timeout or settings.OPENAI_TIMEOUT
        self.session = session or requests.Session()
        self._sleep = sleep

    @property
    def url(self) -> str:
        base = self.endpoint if self.endpoint.endswith("/") else self.endpoint + "/"
        return f"{base}openai/deployments/{self.deployment}/chat/completions?api-version={self.api_version}"

    def complete(self, messages: List[dict]) -> str:
        """Send chat messages, return the assistant's reply text."""
        if not self.endpoint or not self.api_key or not self.deployment:
            raise CompletionServiceError("Azure OpenAI endpoint, key or deployment not configured")
        retrying = with_backoff(sleep=self._sleep)
        return retrying(self._call, messages)

    def _call(self, messages: List[dict]) -> str:
        body = {
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        try:
            resp = self.session.post(
                self.url,
                headers={"Content-Type": "application/json", "api-key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise CompletionServiceError("Cannot reach Azure OpenAI", details=str(e)) from e

        status = resp.status_code
        if status == 401:
            raise CompletionAuthError(_error_message(resp))
        if status == 404:
            raise CompletionNotFoundError(_error_message(resp))
        if status == 429:
            raise CompletionRateLimitError(_error_message(resp))
        if status >= 400:
            raise CompletionServiceError(
                "Failed to get response from AI: " + _error_message(resp),
                status_code=status,
            )

        try:
            data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise CompletionServiceError("Invalid response from Azure OpenAI", details=str(e)) from e
        logger.debug(f"[Chat] Completion received ({len(content or '')} chars)")
        return (content or "").strip()
