import asyncio
import datetime
import email.utils
import random
from typing import Any, Awaitable, Callable, Optional

import aiohttp

from .constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_INTERVAL_SEC,
    DEFAULT_RETRY_JITTER_SEC,
    RETRY_AFTER_HEADER,
)
from .errors import InvalidInputError
from .logger import logger

IDEMPOTENT_METHODS = {"GET", "HEAD", "OPTIONS"}

# Failures before a response is obtained. These are retried like a 5xx.
RETRYABLE_EXCEPTIONS = (
    aiohttp.ClientConnectionError,
    asyncio.TimeoutError,
    ConnectionError,
)


def retry_on_rate_limit_or_server_error(response) -> bool:
    return response.status == 429 or response.status >= 500


def retry_on_rate_limit(response) -> bool:
    return response.status == 429


def parse_retry_after(
    value: Optional[str], now: Optional[datetime.datetime] = None
) -> Optional[float]:
    """Interprets a ``Retry-After`` header as a delay in seconds.

    The header is either a whole number of seconds or an HTTP date. Returns
    ``None`` when the value is missing or unparseable.
    """
    if not value:
        return None
    value = value.strip()
    if value.isascii() and value.isdigit():
        return float(int(value))
    try:
        date = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if date is None:
        return None
    if date.tzinfo is None:
        date = date.replace(tzinfo=datetime.timezone.utc)
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return max(0.0, (date - now).total_seconds())


class RetryStrategy:
    """Decides whether a response is retried and how long to wait first.

    Parameters:
        should_retry: predicate over a failed response. Defaults to never retrying.
        max_retries: number of retryable attempts before the final attempt, whose
            result is returned regardless of ``should_retry``.
        interval: base delay in seconds, doubled on every attempt.
        jitter: upper bound in seconds of the random delay added to each wait.
    """

    def __init__(
        self,
        should_retry: Optional[Callable[[Any], bool]] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        interval: float = DEFAULT_RETRY_INTERVAL_SEC,
        jitter: float = DEFAULT_RETRY_JITTER_SEC,
    ):
        if max_retries < 0:
            raise InvalidInputError(
                f"max_retries must be >= 0, got {max_retries}"
            )
        self.should_retry = should_retry or (lambda response: False)
        self.max_retries = max_retries
        self.interval = interval
        self.jitter = jitter

    def __repr__(self):
        return f"RetryStrategy(max_retries={self.max_retries}, interval={self.interval}, jitter={self.jitter})"

    @classmethod
    def for_method(cls, method: str, **kwargs) -> "RetryStrategy":
        """Idempotent requests retry on 429 and 5xx, everything else only on 429."""
        if method.upper() in IDEMPOTENT_METHODS:
            return cls(should_retry=retry_on_rate_limit_or_server_error, **kwargs)
        return cls(should_retry=retry_on_rate_limit, **kwargs)

    def backoff(self, attempt: int) -> float:
        return self.interval * 2**attempt + random.uniform(0, self.jitter)

    def sleep_time(self, attempt: int, response=None) -> float:
        if response is not None:
            retry_after = parse_retry_after(
                response.headers.get(RETRY_AFTER_HEADER)
            )
            if retry_after is not None:
                return retry_after
        return self.backoff(attempt)


async def with_automatic_retries(
    request: Callable[[], Awaitable[Any]],
    strategy: RetryStrategy,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
):
    """Calls ``request`` until it succeeds or the retry budget is spent.

    Successful responses and responses the strategy does not retry are returned
    straight away. Connection failures are retried like server errors. The last
    attempt is returned (or raises) whatever its outcome.
    """
    for attempt in range(strategy.max_retries):
        response = None
        try:
            response = await request()
        except RETRYABLE_EXCEPTIONS as e:
            logger.info("Request attempt %s failed: %r", attempt + 1, e)
        else:
            if response.status < 400 or not strategy.should_retry(response):
                return response

        delay = strategy.sleep_time(attempt, response)
        if response is not None:
            logger.info(
                "Retrying request after response code %s in %.2fs",
                response.status,
                delay,
            )
            response.release()
        await sleep(delay)

    return await request()
