from typing import Any, List, Optional, Union

from ..errors import InvalidInputError
from ..job import Prediction
from ..pagination import Page
from ..payload_constructor import (
    construct_job_payload,
    construct_prefer_wait_header,
)
from ..url_utils import sanitize_field


class Predictions:
    """Routes under ``/predictions``."""

    def __init__(self, connection):
        self._connection = connection

    async def create(
        self,
        input: Any,  # pylint: disable=redefined-builtin
        version: Optional[str] = None,
        model: Optional[str] = None,
        webhook: Optional[str] = None,
        webhook_events_filter: Optional[List[str]] = None,
        stream: Optional[bool] = None,
        wait: Union[bool, int, None] = None,
    ) -> Prediction:
        """Creates a prediction from a model version or, for official models, a model.

        Parameters:
            input: model inputs. Bytes and binary files are sent inline as data URIs.
            version: version id, runs through ``POST /predictions``
            model: ``owner/name``, runs through ``POST /models/{owner}/{name}/predictions``
            webhook: HTTPS URL notified as the prediction updates
            webhook_events_filter: subset of ``start``, ``output``, ``logs``, ``completed``
            stream: request a ``stream`` URL for server-sent events
            wait: ``True`` or a number of seconds to ask the API to hold the
                response until the prediction finishes. The returned prediction may
                still be running.
        """
        if version is not None and model is not None:
            raise InvalidInputError("Pass either a model or a version, not both")
        headers = construct_prefer_wait_header(wait)
        if version is not None:
            payload = construct_job_payload(
                input,
                webhook=webhook,
                webhook_events_filter=webhook_events_filter,
                stream=stream,
                version=version,
            )
            route = "predictions"
        elif model is not None:
            payload = construct_job_payload(
                input,
                webhook=webhook,
                webhook_events_filter=webhook_events_filter,
                stream=stream,
            )
            owner, _, name = model.partition("/")
            if not owner or not name:
                raise InvalidInputError(
                    f"Invalid model {model!r}, expected owner/name"
                )
            route = f"models/{sanitize_field(owner)}/{sanitize_field(name)}/predictions"
        else:
            raise InvalidInputError("Either model or version must be specified")

        response = await self._connection.post(payload, route, headers=headers)
        return Prediction.from_json(response)

    async def get(self, prediction_id: str) -> Prediction:
        response = await self._connection.get(
            f"predictions/{sanitize_field(prediction_id)}"
        )
        return Prediction.from_json(response)

    async def cancel(self, prediction_id: str) -> Prediction:
        response = await self._connection.post(
            None, f"predictions/{sanitize_field(prediction_id)}/cancel"
        )
        return Prediction.from_json(response)

    async def list(self) -> Page[Prediction]:
        response = await self._connection.get("predictions")
        return Page.from_json(response, Prediction.from_json)
