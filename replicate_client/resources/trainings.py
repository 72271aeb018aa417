from typing import Any, List, Optional

from ..job import Training
from ..pagination import Page
from ..payload_constructor import construct_job_payload
from ..url_utils import sanitize_string_args


@sanitize_string_args
def _training_route(model_owner, model_name, version_id):
    return f"models/{model_owner}/{model_name}/versions/{version_id}/trainings"


@sanitize_string_args
def _route(training_id, action=None):
    route = f"trainings/{training_id}"
    return f"{route}/{action}" if action else route


class Trainings:
    """Routes under ``/trainings``."""

    def __init__(self, connection):
        self._connection = connection

    async def create(
        self,
        model_owner: str,
        model_name: str,
        version_id: str,
        destination: str,
        input: Any,  # pylint: disable=redefined-builtin
        webhook: Optional[str] = None,
        webhook_events_filter: Optional[List[str]] = None,
    ) -> Training:
        """Fine-tunes a model version.

        Parameters:
            destination: ``owner/name`` of the model receiving the trained version
        """
        payload = construct_job_payload(
            input,
            webhook=webhook,
            webhook_events_filter=webhook_events_filter,
            encode_files=False,
            destination=destination,
        )
        response = await self._connection.post(
            payload, _training_route(model_owner, model_name, version_id)
        )
        return Training.from_json(response)

    async def get(self, training_id: str) -> Training:
        response = await self._connection.get(_route(training_id))
        return Training.from_json(response)

    async def cancel(self, training_id: str) -> Training:
        response = await self._connection.post(
            None, _route(training_id, "cancel")
        )
        return Training.from_json(response)

    async def list(self) -> Page[Training]:
        response = await self._connection.get("trainings")
        return Page.from_json(response, Training.from_json)
