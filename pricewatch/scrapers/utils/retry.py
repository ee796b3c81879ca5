"""Retry policies with exponential backoff for record store I/O."""

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
import httpx
import structlog
from sqlalchemy.exc import InterfaceError, OperationalError

logger = structlog.get_logger(__name__)


def _is_server_error(exc: BaseException) -> bool:
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500


def log_retry(retry_state: RetryCallState) -> None:
    """tenacity ``before_sleep`` hook logging the failed attempt."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "store_retry",
        function=getattr(retry_state.fn, "__name__", None),
        attempt=retry_state.attempt_number,
        wait_seconds=round(retry_state.next_action.sleep, 2) if retry_state.next_action else None,
        error=f"{type(exc).__name__}: {exc}" if exc else None,
    )


# Reusable retry decorator for PostgREST requests (httpx)
http_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=(
        retry_if_exception_type(
            (
                httpx.ConnectError,
                httpx.TimeoutException,
                httpx.RemoteProtocolError,
            )
        )
        | retry_if_exception(_is_server_error)
    ),
    before_sleep=log_retry,
    reraise=True,
)


# Reusable retry decorator for SQL writes; only connection-level failures are transient
db_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((OperationalError, InterfaceError)),
    before_sleep=log_retry,
    reraise=True,
)
