from collections.abc import Awaitable, Callable
from logging import getLogger

from sqlalchemy.exc import OperationalError
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.configs import file_logger
from app.errors import CacheConnectionError

logger = file_logger(getLogger(__name__))

type ExceptionTypes = type[Exception] | tuple[type[Exception], ...]

# Transient failures worth another attempt
RETRIABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    CacheConnectionError,
    OperationalError,
    ConnectionError,
    TimeoutError,
)


def _log_before_sleep(max_retries: int) -> Callable[[RetryCallState], None]:
    """
    Create a before_sleep callback that logs retry attempts.

    Args:
        max_retries: Maximum number of attempts, used in the log message.

    Returns:
        Callback function for tenacity before_sleep.
    """

    def before_sleep_callback(retry_state: RetryCallState) -> None:
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        sleep_duration = retry_state.next_action.sleep if retry_state.next_action else 0
        func_name = getattr(retry_state.fn, "__qualname__", "unknown")

        logger.warning(
            "Retry %d/%d for %s after %.2fs delay. Exception: %s",
            retry_state.attempt_number,
            max_retries,
            func_name,
            sleep_duration,
            exception,
        )

    return before_sleep_callback


def with_retry[**P, T](
    max_retries: int = 3,
    base_delay: float = 0.1,
    max_delay: float = 2.0,
    exec_retry: ExceptionTypes = RETRIABLE_EXCEPTIONS,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Retry an async callable with exponential backoff using tenacity.

    The last exception is re-raised once ``max_retries`` attempts are used up.

    Args:
        max_retries: Maximum number of attempts.
        base_delay: Initial delay between attempts in seconds.
        max_delay: Upper bound on the delay in seconds.
        exec_retry: Exception type(s) that trigger another attempt.

    Returns:
        Decorated function with retry logic.
    """
    return retry(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=base_delay, min=base_delay, max=max_delay),
        retry=retry_if_exception_type(exec_retry),
        before_sleep=_log_before_sleep(max_retries),
        reraise=True,
    )
