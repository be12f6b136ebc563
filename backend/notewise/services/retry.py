"""
NoteWise Backend - Rate-Limit Retry Controller
==============================================

What:  Runs an async Gemini call with bounded exponential-backoff retry.
How:   tenacity.AsyncRetrying with:
         retry  → only errors that classify as RATE_LIMITED
         stop   → after `max_retries` attempts in total
         wait   → initial_delay * 2**i seconds before retry i (no jitter)
       Whatever finally escapes is classified into a GeminiError.
Who:   GeminiService.generate_text.

Every call builds its own AsyncRetrying, so there is no shared retry budget
or circuit breaker between calls. The backoff is an awaited sleep: other
requests keep running on the event loop while a call waits.

Example timeline (max_retries=3, initial_delay=1.0, always rate limited):
    attempt 1 → 429 → sleep 1s → attempt 2 → 429 → sleep 2s → attempt 3
    → 429 → RateLimitError raised (3 calls in total)
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from notewise.exceptions import GeminiErrorKind
from notewise.services.error_classifier import classify_gemini_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_rate_limited(exc: BaseException) -> bool:
    return classify_gemini_error(exc).kind is GeminiErrorKind.RATE_LIMITED


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await `operation()` and retry it while it fails with a rate limit.

    Args:
        operation:     Zero-argument coroutine function; called once per attempt.
        max_retries:   Total number of attempts (not extra retries).
        initial_delay: Seconds to wait before the first retry; doubles each time.
        sleep:         Awaitable sleep used for backoff. Tests pass a recorder.

    Returns:
        The first successful result.

    Raises:
        GeminiError: The classified failure. Non-rate-limit errors are raised
            after the first attempt; rate limits once attempts run out.
        ValueError: max_retries is below 1.
    """
    if max_retries < 1:
        raise ValueError(f"max_retries must be at least 1, got {max_retries}")

    retrying = AsyncRetrying(
        retry=retry_if_exception(is_rate_limited),
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=initial_delay, exp_base=2),
        sleep=sleep,
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )

    try:
        return await retrying(operation)
    except Exception as exc:
        error = classify_gemini_error(exc)
        if error is exc:
            raise
        raise error from exc
