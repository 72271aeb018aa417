import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .constants import (
    DEFAULT_POLLING_BACKOFF_BASE_SEC,
    DEFAULT_POLLING_INTERVAL_SEC,
)
from .errors import (
    InvalidInputError,
    PollingTimeoutError,
    PredictionFailedError,
    ReplicateAPIError,
    ReplicateTransportError,
)
from .job import Job
from .logger import logger

JobT = TypeVar("JobT", bound=Job)


def default_backoff(error_count: int) -> float:
    return 2**error_count * DEFAULT_POLLING_BACKOFF_BASE_SEC


class PollingPolicy:
    """How :func:`wait_for_job` paces its fetches.

    Parameters:
        interval: seconds between two fetches while the job is running.
        max_attempts: number of successful fetches after which a still running job
            raises :class:`PollingTimeoutError`. ``None`` polls forever.
        backoff: maps the number of consecutive transient fetch failures to the
            delay before the next fetch.
    """

    def __init__(
        self,
        interval: float = DEFAULT_POLLING_INTERVAL_SEC,
        max_attempts: Optional[int] = None,
        backoff: Callable[[int], float] = default_backoff,
    ):
        if interval < 0:
            raise InvalidInputError(f"interval must be >= 0, got {interval}")
        if max_attempts is not None and max_attempts < 0:
            raise InvalidInputError(
                f"max_attempts must be >= 0, got {max_attempts}"
            )
        self.interval = interval
        self.max_attempts = max_attempts
        self.backoff = backoff

    def __repr__(self):
        return f"PollingPolicy(interval={self.interval}, max_attempts={self.max_attempts})"


async def _call(callback: Optional[Callable[[Any], Any]], job: Job) -> Any:
    if callback is None:
        return None
    result = callback(job)
    if inspect.isawaitable(result):
        result = await result
    return result


async def wait_for_job(
    job: JobT,
    fetch_job: Callable[[str], Awaitable[JobT]],
    policy: Optional[PollingPolicy] = None,
    on_update: Optional[Callable[[JobT], Any]] = None,
    stop: Optional[Callable[[JobT], Any]] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> JobT:
    """Polls a job until it reaches a terminal status.

    Fetches are strictly sequential. ``on_update`` sees the given snapshot first,
    then every fetched snapshot in order, each before it is checked for a terminal
    status. Both callbacks may be plain functions or coroutines.

    Transient failures (429, 5xx and connection errors left over after the
    connection's own retries) back off through ``policy.backoff`` and do not count
    as attempts. Any other API error aborts the wait.

    Parameters:
        job: the snapshot to start from, usually fresh from creation
        fetch_job: fetches the current snapshot for a job id
        policy: pacing, defaults to :class:`PollingPolicy`
        on_update: observer called with every snapshot
        stop: called with each running snapshot before sleeping. Returning a
            truthy value stops polling and returns that snapshot.

    Returns:
        The terminal snapshot, or the running one ``stop`` asked to return.

    Raises:
        PredictionFailedError: the job ended in ``failed``
        PollingTimeoutError: ``policy.max_attempts`` fetches were not enough
    """
    if not job.id:
        raise InvalidInputError(f"Cannot wait for a job without an id: {job}")
    policy = policy or PollingPolicy()

    await _call(on_update, job)

    attempts = 0
    error_count = 0
    delay = policy.interval
    while not job.is_terminal:
        if await _call(stop, job):
            logger.info("Stopped polling job %s in status %s", job.id, job.status)
            break
        if policy.max_attempts is not None and attempts >= policy.max_attempts:
            raise PollingTimeoutError(job.id, attempts)

        await sleep(delay)
        try:
            fetched = await fetch_job(job.id)
        except (ReplicateAPIError, ReplicateTransportError) as e:
            if isinstance(e, ReplicateAPIError) and not e.is_transient:
                raise
            error_count += 1
            delay = policy.backoff(error_count)
            logger.info(
                "Fetching job %s failed (%s in a row), retrying in %.2fs",
                job.id,
                error_count,
                delay,
            )
            continue

        attempts += 1
        error_count = 0
        delay = policy.interval
        job = fetched
        logger.debug("Job %s is %s", job.id, job.status)
        await _call(on_update, job)

    if job.failed:
        raise PredictionFailedError(job)
    return job
