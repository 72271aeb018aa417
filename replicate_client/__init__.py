"""Replicate Python SDK. """

__all__ = [
    "InvalidInputError",
    "Job",
    "JobStatus",
    "ModelVersionIdentifier",
    "NoAPIToken",
    "Page",
    "PollingPolicy",
    "PollingTimeoutError",
    "Prediction",
    "PredictionFailedError",
    "Progress",
    "ReplicateAPIError",
    "ReplicateClient",
    "ReplicateTransportError",
    "RetryStrategy",
    "ServerSentEvent",
    "StreamingNotSupportedError",
    "Training",
    "is_terminal",
    "parse_progress_from_logs",
    "transform_file_inputs",
    "validate_webhook",
]

import asyncio
import os
from typing import Any, AsyncIterator, Callable, List, Optional, Union

import tqdm

from ._metadata import __version__
from .async_utils import run_until_complete
from .connection import Connection
from .constants import (
    API_TOKEN_ENV_VAR,
    BASE_URL_ENV_VAR,
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RETRIES,
)
from .errors import (
    InvalidInputError,
    NoAPIToken,
    PollingTimeoutError,
    PredictionFailedError,
    ReplicateAPIError,
    ReplicateTransportError,
    StreamingNotSupportedError,
)
from .file_inputs import transform_file_inputs
from .identifier import ModelVersionIdentifier
from .job import Job, JobStatus, Prediction, Training, is_terminal
from .pagination import Page, paginate
from .polling import PollingPolicy, wait_for_job
from .progress import Progress, ProgressBarObserver, parse_progress_from_logs
from .resources import (
    Accounts,
    Collections,
    Deployments,
    Files,
    Hardware,
    Models,
    Predictions,
    Trainings,
    Webhooks,
)
from .retry_strategy import RetryStrategy
from .sse import ServerSentEvent
from .stream import stream_events
from .webhooks import validate_webhook


class ReplicateClient:
    """Client to run models on the Replicate API via Python SDK.

    All API calls are coroutines. Run several of them concurrently with
    ``asyncio.gather``; they share nothing but the HTTP transport.

    Parameters:
        api_token: API token. Defaults to the ``REPLICATE_API_TOKEN`` environment
          variable.
        user_agent: Identifier of your app. Default is
          ``replicate-client-python/<version>``.
        base_url: Base URL of the API. Defaults to the ``REPLICATE_BASE_URL``
          environment variable, then to Replicate's production API.
        fetch: Transport used for every HTTP call, called as
          ``await fetch(method, url, headers=..., data=..., stream=...)`` and
          returning an ``aiohttp.ClientResponse`` like object. Default is an
          ``aiohttp`` session owned by the client.
        use_notebook: Whether the client is being used in a notebook (toggles tqdm
          style). Default is ``False``.
        max_retries: Retries of a single HTTP call on rate limits and, for GET
          requests, server errors.
    """

    def __init__(
        self,
        api_token: Optional[str] = None,
        user_agent: Optional[str] = None,
        base_url: Optional[str] = None,
        fetch=None,
        use_notebook: bool = False,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        self.api_token = self._set_api_token(api_token)
        self.tqdm_bar = tqdm.tqdm
        if base_url is None:
            self.base_url = os.environ.get(BASE_URL_ENV_VAR, DEFAULT_BASE_URL)
        else:
            self.base_url = base_url
        self.user_agent = user_agent or f"replicate-client-python/{__version__}"
        self._use_notebook = use_notebook
        if use_notebook:
            import tqdm.notebook as tqdm_notebook

            self.tqdm_bar = tqdm_notebook.tqdm
        self.connection = Connection(
            self.api_token,
            base_url=self.base_url,
            user_agent=self.user_agent,
            fetch=fetch,
            max_retries=max_retries,
        )

        self.accounts = Accounts(self.connection)
        self.collections = Collections(self.connection)
        self.deployments = Deployments(self.connection)
        self.files = Files(self.connection)
        self.hardware = Hardware(self.connection)
        self.models = Models(self.connection)
        self.predictions = Predictions(self.connection)
        self.trainings = Trainings(self.connection)
        self.webhooks = Webhooks(self.connection)

    def __repr__(self):
        return f"ReplicateClient(api_token='{self.api_token}', use_notebook={self._use_notebook}, base_url='{self.base_url}')"

    def __eq__(self, other):
        return (
            self.api_token == other.api_token
            and self.base_url == other.base_url
            and self._use_notebook == other._use_notebook
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Closes the HTTP session of the default transport."""
        await self.connection.close()

    async def run(
        self,
        ref: str,
        input: Any,  # pylint: disable=redefined-builtin
        wait: Union[bool, int, None] = None,
        webhook: Optional[str] = None,
        webhook_events_filter: Optional[List[str]] = None,
        polling: Optional[PollingPolicy] = None,
        progress: Optional[Callable[[Prediction], Any]] = None,
        signal: Optional[asyncio.Event] = None,
        show_progress: bool = False,
    ) -> Any:
        """Runs a model and waits for its output.

        Parameters:
            ref: ``owner/name`` or ``owner/name:version``
            input: model inputs
            wait: ask the API to hold the creation response, see
                :meth:`Predictions.create`
            polling: interval and attempt budget while waiting
            progress: called with the prediction when it is created and every time
                it is fetched while waiting
            signal: when set while waiting, the prediction is canceled
            show_progress: display the progress the model logs on a tqdm bar

        Returns:
            The output of the prediction.

        Raises:
            InvalidInputError: ``ref`` is not a valid model reference
            PredictionFailedError: the prediction failed
            PollingTimeoutError: the polling policy ran out of attempts
        """
        prediction = await self._create_prediction(
            ref,
            input,
            wait=wait,
            webhook=webhook,
            webhook_events_filter=webhook_events_filter,
        )

        progress_bar = (
            ProgressBarObserver(self.tqdm_bar, description=ref)
            if show_progress
            else None
        )

        async def on_update(updated: Prediction):
            if progress_bar is not None:
                progress_bar(updated)
            if progress is not None:
                result = progress(updated)
                if asyncio.iscoroutine(result):
                    await result

        def should_stop(_: Prediction) -> bool:
            return signal is not None and signal.is_set()

        try:
            prediction = await self.wait(
                prediction, polling=polling, on_update=on_update, stop=should_stop
            )
        finally:
            if progress_bar is not None:
                progress_bar.close()

        if not prediction.is_terminal and should_stop(prediction):
            prediction = await self.predictions.cancel(prediction.id)
            await on_update(prediction)

        if prediction.failed:
            raise PredictionFailedError(prediction)
        return prediction.output

    def run_sync(self, ref: str, input: Any, **kwargs) -> Any:  # pylint: disable=redefined-builtin
        """Blocking version of :meth:`run`, usable in scripts and notebooks."""
        return run_until_complete(self.run(ref, input, **kwargs))

    async def stream(
        self,
        ref: str,
        input: Any,  # pylint: disable=redefined-builtin
        webhook: Optional[str] = None,
        webhook_events_filter: Optional[List[str]] = None,
        signal: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[ServerSentEvent]:
        """Runs a model and yields its server-sent events as they arrive.

        Example::

            async for event in client.stream("meta/llama", {"prompt": "hi"}):
                print(str(event), end="")

        Raises:
            StreamingNotSupportedError: the model cannot stream its output
        """
        prediction = await self._create_prediction(
            ref,
            input,
            webhook=webhook,
            webhook_events_filter=webhook_events_filter,
            stream=True,
        )
        async for event in self.stream_job(prediction, signal=signal):
            yield event

    async def stream_job(
        self, job: Job, signal: Optional[asyncio.Event] = None
    ) -> AsyncIterator[ServerSentEvent]:
        """Yields the server-sent events of an existing prediction."""
        if not job.urls.stream:
            raise StreamingNotSupportedError(job.id)
        async for event in stream_events(
            self.connection, job.urls.stream, signal=signal
        ):
            yield event

    async def wait(
        self,
        job: Job,
        polling: Optional[PollingPolicy] = None,
        on_update: Optional[Callable[[Job], Any]] = None,
        stop: Optional[Callable[[Job], Any]] = None,
    ) -> Job:
        """Polls a prediction or training until it finishes. See :func:`wait_for_job`."""
        fetch_job = (
            self.trainings.get
            if isinstance(job, Training)
            else self.predictions.get
        )
        return await wait_for_job(
            job, fetch_job, policy=polling, on_update=on_update, stop=stop
        )

    def paginate(self, endpoint) -> AsyncIterator[list]:
        """Walks every page of a listing.

        Example::

            async for predictions in client.paginate(client.predictions.list):
                ...
        """
        return paginate(self.connection, endpoint)

    async def _create_prediction(self, ref: str, input: Any, **kwargs) -> Prediction:  # pylint: disable=redefined-builtin
        identifier = ModelVersionIdentifier.parse(ref)
        if identifier.version:
            return await self.predictions.create(
                input, version=identifier.version, **kwargs
            )
        return await self.predictions.create(
            input, model=identifier.model, **kwargs
        )

    def _set_api_token(self, api_token):
        """Fetch API token from environment variable REPLICATE_API_TOKEN if not set"""
        api_token = (
            api_token if api_token else os.environ.get(API_TOKEN_ENV_VAR, None)
        )
        if api_token is None:
            raise NoAPIToken()

        return api_token
