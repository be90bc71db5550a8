"""
Infrastructure-specific decorators, providing cross-cutting concerns like
retry logic for network operations.
"""

import logging

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception,
)

logger = logging.getLogger(__name__)

# --- Constants for Retry Logic ---
_RETRY_ATTEMPTS = 3
_RETRY_MIN_WAIT_SECONDS = 1
_RETRY_MAX_WAIT_SECONDS = 10

# Only these may be resent after the server could have received them.
_IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def _log_before_retry(retry_state):
    """Log the failed network call and when it will be attempted again."""
    exception = retry_state.outcome.exception()
    logger.warning(
        f"Network error on {retry_state.fn.__name__} "
        f"({type(exception).__name__}: {exception}); attempt "
        f"{retry_state.attempt_number} of {_RETRY_ATTEMPTS}, retrying in "
        f"{retry_state.next_action.sleep:.2f}s..."
    )


def _is_retryable(exception: BaseException) -> bool:
    """Decide whether a failed request can safely be sent again."""
    if isinstance(exception, (httpx.ConnectError, httpx.ConnectTimeout)):
        return True
    if isinstance(exception, httpx.TimeoutException):
        try:
            method = exception.request.method
        except RuntimeError:
            return False
        return method.upper() in _IDEMPOTENT_METHODS
    return False


# A pre-configured decorator for async network operations. API-level
# failures are classified by the caller and never retried here. Requests
# that never reached the server are always retried; read and write
# timeouts only for idempotent methods.
retry_on_network_error = retry(
    stop=stop_after_attempt(_RETRY_ATTEMPTS),
    wait=wait_exponential(
        multiplier=1,
        min=_RETRY_MIN_WAIT_SECONDS,
        max=_RETRY_MAX_WAIT_SECONDS,
    ),
    retry=retry_if_exception(_is_retryable),
    before_sleep=_log_before_retry,
    reraise=True,
)
