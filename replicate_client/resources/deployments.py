from typing import Any, Dict, List, Optional

from ..job import Prediction
from ..pagination import Page
from ..payload_constructor import (
    construct_job_payload,
    construct_prefer_wait_header,
)
from ..url_utils import sanitize_string_args


@sanitize_string_args
def _deployment_route(deployment_owner, deployment_name, *parts):
    return "/".join(["deployments", deployment_owner, deployment_name, *parts])


class DeploymentPredictions:
    def __init__(self, connection):
        self._connection = connection

    async def create(
        self,
        deployment_owner: str,
        deployment_name: str,
        input: Any,  # pylint: disable=redefined-builtin
        webhook: Optional[str] = None,
        webhook_events_filter: Optional[List[str]] = None,
        stream: Optional[bool] = None,
        wait=None,
    ) -> Prediction:
        payload = construct_job_payload(
            input,
            webhook=webhook,
            webhook_events_filter=webhook_events_filter,
            stream=stream,
        )
        response = await self._connection.post(
            payload,
            _deployment_route(deployment_owner, deployment_name, "predictions"),
            headers=construct_prefer_wait_header(wait),
        )
        return Prediction.from_json(response)


class Deployments:
    """Routes under ``/deployments``."""

    def __init__(self, connection):
        self._connection = connection
        self.predictions = DeploymentPredictions(connection)

    async def get(
        self, deployment_owner: str, deployment_name: str
    ) -> Dict[str, Any]:
        return await self._connection.get(
            _deployment_route(deployment_owner, deployment_name)
        )

    async def list(self) -> Page:
        response = await self._connection.get("deployments")
        return Page.from_json(response)

    async def create(
        self,
        name: str,
        model: str,
        version: str,
        hardware: str,
        min_instances: int,
        max_instances: int,
    ) -> Dict[str, Any]:
        payload = {
            "name": name,
            "model": model,
            "version": version,
            "hardware": hardware,
            "min_instances": min_instances,
            "max_instances": max_instances,
        }
        return await self._connection.post(payload, "deployments")

    async def update(
        self, deployment_owner: str, deployment_name: str, **fields
    ) -> Dict[str, Any]:
        """Updates any of ``version``, ``hardware``, ``min_instances``, ``max_instances``."""
        return await self._connection.patch(
            fields, _deployment_route(deployment_owner, deployment_name)
        )

    async def delete(self, deployment_owner: str, deployment_name: str) -> bool:
        response = await self._connection.make_request(
            None,
            _deployment_route(deployment_owner, deployment_name),
            method="DELETE",
            return_raw_response=True,
        )
        response.release()
        return response.status == 204
