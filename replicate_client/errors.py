from typing import TYPE_CHECKING, Any, Mapping, Optional

from ._metadata import __version__

if TYPE_CHECKING:
    from .job import Job

client_version = __version__


class ReplicateAPIError(Exception):
    """The API answered with a non-2xx status code."""

    def __init__(
        self,
        endpoint: str,
        method: str,
        status_code: int,
        reason: Optional[str] = None,
        detail: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ):
        self.endpoint = endpoint
        self.method = method
        self.status_code = status_code
        self.reason = reason
        self.detail = detail
        self.headers = dict(headers or {})
        self.message = f"Your client is on version {client_version}.\n"
        self.message += f"Tried to {method} {endpoint}, but received {status_code}: {reason}."
        if detail:
            self.message += f"\nThe detailed error is:\n{detail}"
        if self.is_transient:
            self.message += "\nThis likely indicates temporary downtime or rate limiting of the API, please try again shortly."
        super().__init__(self.message)

    @property
    def is_transient(self) -> bool:
        return self.status_code == 429 or self.status_code >= 500


class ReplicateTransportError(Exception):
    def __init__(self, endpoint: str, method: str, cause: BaseException):
        self.endpoint = endpoint
        self.method = method
        self.cause = cause
        self.message = f"Could not {method} {endpoint}: {cause!r}"
        super().__init__(self.message)


class InvalidInputError(ValueError):
    def __init__(self, message="Invalid input"):
        self.message = message
        super().__init__(self.message)


class PredictionFailedError(Exception):
    def __init__(self, job: "Job"):
        self.job = job
        self.error: Any = job.error
        kind = type(job).__name__
        self.message = f"{kind} {job.id} failed: {job.error}"
        super().__init__(self.message)


class PollingTimeoutError(TimeoutError):
    def __init__(self, job_id: str, attempts: int):
        self.job_id = job_id
        self.attempts = attempts
        self.message = f"Job {job_id} did not reach a terminal status after {attempts} polling attempts"
        super().__init__(self.message)


class StreamingNotSupportedError(Exception):
    def __init__(self, job_id: Optional[str] = None):
        self.job_id = job_id
        self.message = f"Prediction {job_id} does not support streaming"
        super().__init__(self.message)


class NoAPIToken(Exception):
    def __init__(
        self,
        message="You need to pass an API token to the ReplicateClient or set the environment variable REPLICATE_API_TOKEN",
    ):
        self.message = message
        super().__init__(self.message)
