"""Retry with exponential backoff, and polling for resource status changes."""

import time
import random
from typing import Callable, Iterable, Optional, TypeVar
from functools import wraps
from botocore.exceptions import ClientError
from tfaws.utils.errors import NotFoundError, ProviderError, ErrorCategory, error_code
from tfaws.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


class RetryStrategy:
    """Exponential backoff retry for transient errors."""

    RETRYABLE_ERROR_CODES = {
        'RequestTimeout',
        'ServiceUnavailable',
        'ThrottlingException',
        'TooManyRequestsException',
        'Throttling',
        'InternalServerException',
        'InternalFailure',
    }

    RETRYABLE_EXCEPTIONS = (
        ConnectionError,
        TimeoutError,
    )

    def __init__(
        self,
        max_retries: int = 5,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
        retryable_codes: Optional[Iterable[str]] = None
    ):
        """Initialize retry strategy.

        Args:
            max_retries: Maximum number of retry attempts
            base_delay: Base delay in seconds for first retry
            max_delay: Maximum delay in seconds between retries
            exponential_base: Base for exponential backoff calculation
            jitter: Whether to add random jitter to delay
            retryable_codes: Extra AWS error codes to retry, e.g. eventual
                consistency errors right after a dependency was created
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.retryable_codes = set(self.RETRYABLE_ERROR_CODES)
        if retryable_codes:
            self.retryable_codes.update(retryable_codes)

    def should_retry(self, error: Exception, attempt: int) -> bool:
        """Determine if an error should trigger a retry."""
        if attempt >= self.max_retries:
            return False

        if isinstance(error, self.RETRYABLE_EXCEPTIONS):
            return True

        if isinstance(error, ClientError):
            return error_code(error) in self.retryable_codes

        return False

    def get_delay(self, attempt: int) -> float:
        """Calculate delay before the next retry."""
        delay = min(
            self.base_delay * (self.exponential_base ** attempt),
            self.max_delay
        )

        if self.jitter:
            delay += random.uniform(0, delay * 0.1)

        return delay

    def execute_with_retry(self, func: Callable[..., T], *args, **kwargs) -> T:
        """Execute a function, retrying retryable failures.

        Raises:
            The last exception if it is not retryable or retries are exhausted
        """
        attempt = 0
        while True:
            try:
                result = func(*args, **kwargs)
                if attempt > 0:
                    logger.info(f"Operation succeeded after {attempt} retries")
                return result
            except Exception as e:
                if not self.should_retry(e, attempt):
                    raise

                delay = self.get_delay(attempt)
                logger.warning(
                    f"Attempt {attempt + 1}/{self.max_retries + 1} failed: "
                    f"{error_code(e) or type(e).__name__}: {e}. Retrying in {delay:.2f}s..."
                )
                time.sleep(delay)
                attempt += 1


def with_retry(
    max_retries: int = 5,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    retryable_codes: Optional[Iterable[str]] = None
):
    """Decorator adding RetryStrategy to a function.

    Example:
        @with_retry(max_retries=3, retryable_codes=['ResourceNotFoundException'])
        def create_channel(conn, params):
            return conn.create_contact_channel(**params)
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            strategy = RetryStrategy(
                max_retries=max_retries,
                base_delay=base_delay,
                max_delay=max_delay,
                retryable_codes=retryable_codes
            )
            return strategy.execute_with_retry(func, *args, **kwargs)

        return wrapper

    return decorator


class UnexpectedStatusError(ProviderError):
    """A polled resource reached a status outside pending and target."""

    def __init__(self, message: str, status: Optional[str] = None, **kwargs):
        super().__init__(message, category=ErrorCategory.STATE, **kwargs)
        self.status = status


class WaitTimeoutError(ProviderError):
    """A polled resource did not reach its target status in time."""

    def __init__(self, message: str, last_status: Optional[str] = None, **kwargs):
        super().__init__(message, category=ErrorCategory.STATE, **kwargs)
        self.last_status = last_status


def wait_for_status(
    refresh: Callable[[], Optional[str]],
    target: Iterable[str],
    pending: Iterable[str],
    timeout: float = 600.0,
    poll_interval: float = 5.0,
    description: str = 'resource'
) -> Optional[str]:
    """Poll ``refresh`` until the status is in ``target``.

    ``refresh`` returns the current status, or None once the object is gone.
    An empty ``target`` means waiting for deletion: None then ends the wait.

    Returns:
        The reached status, or None when waiting for deletion

    Raises:
        NotFoundError: The object disappeared while a status was expected
        UnexpectedStatusError: The status is neither pending nor target
        WaitTimeoutError: The timeout elapsed
    """
    target = set(target)
    pending = set(pending)
    deadline = time.monotonic() + timeout
    status = None

    while True:
        status = refresh()

        if status is None:
            if not target:
                return None
            raise NotFoundError(f"{description} not found while waiting for {sorted(target)}")

        if status in target:
            return status

        if status not in pending:
            raise UnexpectedStatusError(
                f"unexpected state '{status}' for {description}, wanted target {sorted(target)}",
                status=status
            )

        if time.monotonic() >= deadline:
            raise WaitTimeoutError(
                f"timeout while waiting for {description} to reach {sorted(target) or 'deleted'} "
                f"(last state: '{status}', timeout: {timeout}s)",
                last_status=status
            )

        logger.debug(f"Waiting for {description}: status {status}")
        time.sleep(poll_interval)
