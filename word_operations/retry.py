"""
Retry Utilities for Word Operations

Provides the single automatic retry applied to an operation that was cut off
by a reconnection. Timeouts and other connection errors are NOT retried here:
they are reported to the ConnectionSupervisor, which decides on rotation.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt

from connection_management.connection_exceptions import ConnectionClosedError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# The original call plus exactly one retry
MAX_ATTEMPTS = 2


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"Connection closed during reconnect (attempt {retry_state.attempt_number}/"
        f"{MAX_ATTEMPTS}): {error}. Retrying on the new connection"
    )


async def retry_on_reconnect(
    operation: Callable[[], Awaitable[T]],
    operation_name: str,
) -> T:
    """
    Run ``operation`` and re-issue it once if it raises ``ConnectionClosedError``.

    Args:
        operation: Zero-argument coroutine function performing one attempt
        operation_name: Human-readable name for logging

    Returns:
        Result of the first successful attempt

    Raises:
        ConnectionClosedError: If the retry is cut off as well
        Any other exception: Propagated immediately without retry
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(MAX_ATTEMPTS),
        retry=retry_if_exception_type(ConnectionClosedError),
        before_sleep=_log_retry,
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            result = await operation()
    if attempt.retry_state.attempt_number > 1:
        logger.info(f"{operation_name} succeeded after retry")
    return result
