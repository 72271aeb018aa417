"""Predictions and trainings, and the lifecycle they move through.

A job is created by the API in the ``starting`` status, moves to ``processing`` and
ends in one of the terminal statuses ``succeeded``, ``failed`` or ``canceled``::

    starting -> processing -> succeeded | failed | canceled
    starting | processing -> canceled   (explicit cancel request)

Jobs are immutable values. The only way to observe a transition is to fetch a
fresh snapshot from the API.
"""
import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .constants import ID_KEY, URLS_KEY
from .logger import logger
from .pydantic_base import DictCompatibleImmutableModel, Field


class JobStatus(str, Enum):
    STARTING = "starting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @staticmethod
    def options() -> List[str]:
        return list(map(lambda c: c.value, JobStatus))

    @classmethod
    def parse(cls, status: Union[str, "JobStatus"]) -> Optional["JobStatus"]:
        """Returns the matching member, or None for a status this client does not know."""
        try:
            return cls(status)
        except ValueError:
            return None


TERMINAL_STATUSES = frozenset(
    {
        JobStatus.SUCCEEDED.value,
        JobStatus.FAILED.value,
        JobStatus.CANCELED.value,
    }
)


def is_terminal(status: Union[str, JobStatus, None]) -> bool:
    """True only for ``succeeded``, ``failed`` and ``canceled``.

    Unrecognized statuses are not terminal: pollers keep polling them.
    """
    status = getattr(status, "value", status)
    if status not in TERMINAL_STATUSES and JobStatus.parse(status) is None:
        logger.warning("Unrecognized job status %r, treating as running", status)
    return status in TERMINAL_STATUSES


class JobURLs(DictCompatibleImmutableModel):
    get: Optional[str] = None
    cancel: Optional[str] = None
    stream: Optional[str] = None


class Job(DictCompatibleImmutableModel):
    """A snapshot of a prediction or training.

    Fields the client does not model are kept in ``additional_fields`` so that nothing the
    API returns is lost.
    """

    id: str
    status: str
    input: Any = None
    output: Any = None
    error: Any = None
    logs: Optional[str] = None
    metrics: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime.datetime] = None
    started_at: Optional[datetime.datetime] = None
    completed_at: Optional[datetime.datetime] = None
    urls: JobURLs = Field(default_factory=JobURLs)
    additional_fields: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_json(cls, payload: Dict[str, Any]):
        if ID_KEY not in payload:
            raise ValueError(f"Job payload is missing an id: {payload}")
        known = {
            key: value
            for key, value in payload.items()
            if key in cls.__fields__ and key != "additional_fields"
        }
        additional_fields = {
            key: value
            for key, value in payload.items()
            if key not in cls.__fields__
        }
        if known.get(URLS_KEY) is None:
            known.pop(URLS_KEY, None)
        return cls(**known, additional_fields=additional_fields)

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    @property
    def succeeded(self) -> bool:
        return self.status == JobStatus.SUCCEEDED.value

    @property
    def failed(self) -> bool:
        return self.status == JobStatus.FAILED.value

    @property
    def canceled(self) -> bool:
        return self.status == JobStatus.CANCELED.value


class Prediction(Job):
    version: Optional[str] = None
    model: Optional[str] = None


class Training(Job):
    version: Optional[str] = None
    model: Optional[str] = None
    destination: Optional[str] = None
