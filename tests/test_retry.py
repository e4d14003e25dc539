"""Tests for docchunker.core.retry — backoff on rate limiting only."""

import pytest

from docchunker.core.errors import (
    CompletionRateLimitError,
    ExtractionError,
    NotFoundError,
    is_rate_limited,
)
from docchunker.core.retry import with_backoff


class Flaky:
    def __init__(self, failures, result="ok"):
        self.failures = list(failures)
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


def _retrying(sleeps, **kwargs):
    kwargs.setdefault("max_attempts", 4)
    return with_backoff(base_delay=1.0, max_delay=30.0, total_timeout=600, sleep=sleeps.append, **kwargs)


def test_is_rate_limited():
    assert is_rate_limited(ExtractionError("slow down", status_code=429))
    assert is_rate_limited(CompletionRateLimitError())
    assert not is_rate_limited(ExtractionError("bad", status_code=500))
    assert not is_rate_limited(NotFoundError("x"))
    assert not is_rate_limited(ValueError("x"))


def test_retries_rate_limited_calls_then_succeeds():
    sleeps = []
    fn = Flaky([ExtractionError("busy", status_code=429)] * 2)
    assert _retrying(sleeps)(fn) == "ok"
    assert fn.calls == 3
    assert len(sleeps) == 2
    # exponential base plus up to base_delay of jitter
    assert 1.0 <= sleeps[0] <= 2.0
    assert 2.0 <= sleeps[1] <= 3.0


def test_gives_up_after_max_attempts():
    sleeps = []
    fn = Flaky([CompletionRateLimitError()] * 10)
    with pytest.raises(CompletionRateLimitError):
        _retrying(sleeps, max_attempts=3)(fn)
    assert fn.calls == 3
    assert len(sleeps) == 2


def test_other_errors_are_not_retried():
    sleeps = []
    fn = Flaky([ExtractionError("broken", status_code=500)])
    with pytest.raises(ExtractionError):
        _retrying(sleeps)(fn)
    assert fn.calls == 1
    assert sleeps == []


def test_wait_is_capped():
    sleeps = []
    fn = Flaky([ExtractionError("busy", status_code=429)] * 5)
    retrying = with_backoff(max_attempts=6, base_delay=1.0, max_delay=3.0, total_timeout=600, sleep=sleeps.append)
    assert retrying(fn) == "ok"
    assert all(s <= 4.0 for s in sleeps)


def test_explicit_zero_limits_are_honoured():
    sleeps = []
    fn = Flaky([ExtractionError("busy", status_code=429)] * 3)
    retrying = with_backoff(max_attempts=5, base_delay=0, max_delay=0, total_timeout=0, sleep=sleeps.append)
    with pytest.raises(ExtractionError):
        retrying(fn)
    assert fn.calls == 1

    fn = Flaky([ExtractionError("busy", status_code=429)] * 3)
    retrying = with_backoff(max_attempts=0, base_delay=0, max_delay=0, total_timeout=600, sleep=sleeps.append)
    with pytest.raises(ExtractionError):
        retrying(fn)
    assert fn.calls == 1
