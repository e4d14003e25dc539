# backend/docchunker/core/retry.py
"""
Bounded retry for calls to external services.

Only rate-limited upstream errors (HTTP 429) are retried. The wait grows
exponentially from base_delay with random jitter, capped at max_delay, and
retrying stops after max_attempts calls or total_timeout seconds, whichever
comes first. The last error is re-raised.
"""
from typing import Callable

from loguru import logger
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    wait_random,
)

from docchunker.core.config import settings
from docchunker.core.errors import is_rate_limited


def _log_retry(state: RetryCallState) -> None:
    error = state.outcome.exception() if state.outcome else None
    delay = state.next_action.sleep if state.next_action else 0.0
    logger.warning(f"[Retry] Rate limited (attempt {state.attempt_number}). Retrying in {delay:.1f}s: {error}")


def with_backoff(
    max_attempts: int = None,
    base_delay: float = None,
    max_delay: float = None,
    total_timeout: float = None,
    sleep: Callable[[float], None] = None,
) -> Retrying:
    max_attempts = settings.RETRY_MAX_ATTEMPTS if max_attempts is None else max_attempts
    base_delay = settings.RETRY_BASE_DELAY if base_delay is None else base_delay
    max_delay = settings.RETRY_MAX_DELAY if max_delay is None else max_delay
    total_timeout = settings.RETRY_TOTAL_TIMEOUT if total_timeout is None else total_timeout

    kwargs = {}
    if sleep is not None:
        kwargs["sleep"] = sleep
    return Retrying(
        retry=retry_if_exception(is_rate_limited),
        stop=stop_after_attempt(max_attempts) | stop_after_delay(total_timeout),
        wait=wait_exponential(multiplier=base_delay, max=max_delay) + wait_random(0, base_delay),
        before_sleep=_log_retry,
        reraise=True,
        **kwargs,
    )
