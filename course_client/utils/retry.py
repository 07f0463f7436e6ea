"""Retry utilities for idempotent requests using Tenacity."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..errors.internal import NetworkError

T = TypeVar("T")


async def retry_network_errors(
    operation: Callable[[], Awaitable[T]],
    *,
    context: str,
    max_attempts: int,
    backoff: float,
    max_backoff: float,
) -> T:
    """Run an operation, retrying only on NetworkError with exponential backoff.

    The last NetworkError is re-raised unchanged once attempts are exhausted,
    so callers see the same error type whether or not retries happened. Any
    other exception (HTTP errors included) propagates immediately.

    Args:
        operation: Zero-argument coroutine factory performing one attempt.
        context: Descriptive label for log messages (e.g. "GET /courses/").
        max_attempts: Total number of attempts (1 disables retry).
        backoff: Exponential backoff multiplier in seconds.
        max_backoff: Upper bound of a single wait in seconds.

    Returns:
        The operation result.
    """

    def before_retry(retry_state):
        if retry_state.attempt_number > 1:
            logging.info(f"🔁 Retrying {context} (attempt {retry_state.attempt_number}/{max_attempts})")

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=backoff, max=max_backoff),
        retry=retry_if_exception_type(NetworkError),
        before=before_retry,
        reraise=True,
    )
    return await retrying(operation)
