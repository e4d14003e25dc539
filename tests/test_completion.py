"""Tests for docchunker.core.completion — Azure OpenAI chat client."""

from unittest.mock import MagicMock

import pytest
import requests

from docchunker.core.completion import CompletionClient
from docchunker.core.errors import (
    CompletionAuthError,
    CompletionNotFoundError,
    CompletionRateLimitError,
    CompletionServiceError,
)

MESSAGES = [{"role": "system", "content": "sys"}, {"role": "user", "content": "q"}]


def _response(status=200, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload if payload is not None else {}
    resp.text = text
    return resp


def _reply(content):
    return _response(200, {"choices": [{"message": {"role": "assistant", "content": content}}]})


def _client(session, **kwargs):
    return CompletionClient(
        endpoint="https://example.openai.azure.com/",
        api_key="key",
        deployment="gpt",
        api_version="2024-02-15-preview",
        temperature=0.7,
        max_tokens=1000,
        session=session,
        sleep=lambda s: None,
        **kwargs,
    )


def test_complete_returns_reply():
    session = MagicMock()
    session.post.return_value = _reply("  Forty-two.  ")

    assert _client(session).complete(MESSAGES) == "Forty-two."

    call = session.post.call_args
    assert call.args[0] == (
        "https://example.openai.azure.com/openai/deployments/gpt/chat/completions?api-version=2024-02-15-preview"
    )
    assert call.kwargs["headers"]["api-key"] == "key"
    assert call.kwargs["json"] == {"messages": MESSAGES, "temperature": 0.7, "max_tokens": 1000}


@pytest.mark.parametrize(
    "status, error_type",
    [(401, CompletionAuthError), (404, CompletionNotFoundError)],
)
def test_status_maps_to_error(status, error_type):
    session = MagicMock()
    session.post.return_value = _response(status, {"error": {"message": "nope"}})
    with pytest.raises(error_type) as exc_info:
        _client(session).complete(MESSAGES)
    assert exc_info.value.details == "nope"
    assert session.post.call_count == 1


def test_auth_error_message():
    session = MagicMock()
    session.post.return_value = _response(401)
    with pytest.raises(CompletionAuthError) as exc_info:
        _client(session).complete(MESSAGES)
    assert exc_info.value.message == "Azure OpenAI authentication failed. Check your API key."


def test_rate_limit_retried_then_raised():
    session = MagicMock()
    session.post.return_value = _response(429, text="slow down")
    with pytest.raises(CompletionRateLimitError):
        _client(session).complete(MESSAGES)
    assert session.post.call_count == 4


def test_rate_limit_recovers():
    session = MagicMock()
    session.post.side_effect = [_response(429), _reply("done")]
    assert _client(session).complete(MESSAGES) == "done"


def test_server_error_message():
    session = MagicMock()
    session.post.return_value = _response(500, {"error": {"message": "internal"}})
    with pytest.raises(CompletionServiceError) as exc_info:
        _client(session).complete(MESSAGES)
    assert exc_info.value.message == "Failed to get response from AI: internal"
    assert exc_info.value.status_code == 500


def test_malformed_response():
    session = MagicMock()
    session.post.return_value = _response(200, {"choices": []})
    with pytest.raises(CompletionServiceError, match="Invalid response"):
        _client(session).complete(MESSAGES)


def test_connection_error():
    session = MagicMock()
    session.post.side_effect = requests.Timeout("timed out")
    with pytest.raises(CompletionServiceError, match="Cannot reach"):
        _client(session).complete(MESSAGES)


def test_not_configured():
    client = CompletionClient(endpoint="", api_key="", deployment="", session=MagicMock())
    with pytest.raises(CompletionServiceError, match="not configured"):
        client.complete(MESSAGES)
