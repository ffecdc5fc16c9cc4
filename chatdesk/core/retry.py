"""Retry policy for calls to the upstream chat API."""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from httpx import ConnectError, NetworkError, TimeoutException
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Only transport failures are retried. An upstream HTTP error status is a
# real answer and is relayed to the caller as is.
RETRYABLE_EXCEPTIONS = (
    TimeoutException,
    ConnectError,
    NetworkError,
)


def is_retryable(exception: BaseException) -> bool:
    """Check whether an exception is a transient transport failure."""
    return isinstance(exception, RETRYABLE_EXCEPTIONS)


def _log_retry(max_attempts: int) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        name = getattr(retry_state.fn, "__name__", "call")
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            f"Retrying {name} after {error!r} (attempt {retry_state.attempt_number}/{max_attempts})"
        )

    return before_sleep


def retry_with_backoff(
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator to retry a function on transport errors with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts, including the first
        min_wait: Minimum wait time in seconds
        max_wait: Maximum wait time in seconds

    Returns:
        Decorated function with retry logic; the last error is re-raised
    """
    decorator: Any = retry(
        retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        reraise=True,
        before_sleep=_log_retry(max_attempts),
    )
    return decorator  # type: ignore[no-any-return]
