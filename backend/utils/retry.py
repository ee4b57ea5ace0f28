import asyncio
import random
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

import httpx

from utils.logger import get_logger

logger = get_logger("retry")

T = TypeVar("T")


class RetryConfig:
    """Configuration for retry behavior"""

    def __init__(
        self,
        max_attempts: int = 4,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
        retryable_exceptions: Tuple[Type[Exception], ...] = (
            httpx.TimeoutException,
            httpx.NetworkError,
            ConnectionError,
            asyncio.TimeoutError,
        ),
        retryable_status_codes: Tuple[int, ...] = (429, 500, 502, 503, 504),
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.retryable_exceptions = retryable_exceptions
        self.retryable_status_codes = retryable_status_codes


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Calculate delay with exponential backoff and optional jitter.

    Jitter only ever stretches the delay (up to +50%) and the result is
    still capped at ``max_delay``.
    """
    delay = min(config.base_delay * (config.exponential_base**attempt), config.max_delay)
    if config.jitter:
        delay = min(delay * (1.0 + random.random() * 0.5), config.max_delay)
    return delay


def is_retryable_error(error: Exception, config: RetryConfig) -> bool:
    """Check if an error should be retried"""
    if isinstance(error, config.retryable_exceptions):
        return True

    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in config.retryable_status_codes

    return False


async def retry_with_delay(
    operation: Callable[[], Awaitable[T]],
    max_retries: int,
    config: Optional[RetryConfig] = None,
    non_retryable: Tuple[Type[BaseException], ...] = (),
) -> T:
    """Run ``operation`` and retry it up to ``max_retries`` more times on failure.

    Any ``Exception`` is retried except those listed in ``non_retryable``,
    which are re-raised immediately. Once retries are exhausted the last
    error is re-raised so the caller decides what to do with it.

    The wait between attempts never shrinks: each delay is at least the
    previous one, even when jitter or the ``max_delay`` cap would say
    otherwise.
    """
    if max_retries < 0:
        raise ValueError("max_retries must be >= 0")

    config = config or RetryConfig()
    name = getattr(operation, "__name__", repr(operation))
    previous_delay = 0.0
    attempt = 0

    while True:
        try:
            return await operation()
        except non_retryable:
            raise
        except Exception as e:
            if attempt >= max_retries:
                logger.error(
                    "All retry attempts exhausted",
                    function=name,
                    attempts=attempt + 1,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            delay = max(previous_delay, calculate_delay(attempt, config))
            previous_delay = delay
            attempt += 1
            logger.warning(
                "Retrying after error",
                function=name,
                attempt=attempt,
                max_retries=max_retries,
                delay=delay,
                error=str(e),
                error_type=type(e).__name__,
            )
            await asyncio.sleep(delay)


class RetryableClient:
    """HTTP client wrapper with automatic retry"""

    def __init__(self, client: httpx.AsyncClient, config: RetryConfig = None):
        self.client = client
        self.config = config or RetryConfig()

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Make a request with retry logic"""
        last_error = None

        for attempt in range(self.config.max_attempts):
            try:
                response = await self.client.request(method, url, **kwargs)
                response.raise_for_status()
                return response
            except Exception as e:
                last_error = e

                if not is_retryable_error(e, self.config):
                    raise

                if attempt < self.config.max_attempts - 1:
                    delay = calculate_delay(attempt, self.config)

                    # Special handling for rate limits
                    if isinstance(e, httpx.HTTPStatusError) and e.response.status_code == 429:
                        retry_after = e.response.headers.get("Retry-After")
                        if retry_after:
                            try:
                                delay = max(delay, float(retry_after))
                            except ValueError:
                                pass

                    logger.warning(
                        "Retrying HTTP request",
                        method=method,
                        url=url,
                        attempt=attempt + 1,
                        delay=delay,
                        error=str(e),
                    )
                    await asyncio.sleep(delay)

        raise last_error

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("GET", url, **kwargs)
