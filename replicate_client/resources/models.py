from typing import Any, Dict, Optional

from ..pagination import Page
from ..url_utils import sanitize_string_args


@sanitize_string_args
def _model_route(model_owner, model_name, *parts):
    return "/".join(["models", model_owner, model_name, *parts])


class ModelVersions:
    def __init__(self, connection):
        self._connection = connection

    async def list(self, model_owner: str, model_name: str) -> Page:
        response = await self._connection.get(
            _model_route(model_owner, model_name, "versions")
        )
        return Page.from_json(response)

    async def get(
        self, model_owner: str, model_name: str, version_id: str
    ) -> Dict[str, Any]:
        return await self._connection.get(
            _model_route(model_owner, model_name, "versions", version_id)
        )


class Models:
    """Routes under ``/models``."""

    def __init__(self, connection):
        self._connection = connection
        self.versions = ModelVersions(connection)

    async def get(self, model_owner: str, model_name: str) -> Dict[str, Any]:
        return await self._connection.get(_model_route(model_owner, model_name))

    async def list(self) -> Page:
        response = await self._connection.get("models")
        return Page.from_json(response)

    async def create(
        self,
        model_owner: str,
        model_name: str,
        visibility: str,
        hardware: str,
        description: Optional[str] = None,
        github_url: Optional[str] = None,
        paper_url: Optional[str] = None,
        license_url: Optional[str] = None,
        cover_image_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Creates a model owned by the user or organization of the API token.

        Parameters:
            visibility: ``public`` or ``private``
            hardware: a hardware SKU from ``client.hardware.list()``
        """
        payload = {
            "owner": model_owner,
            "name": model_name,
            "visibility": visibility,
            "hardware": hardware,
        }
        optional = {
            "description": description,
            "github_url": github_url,
            "paper_url": paper_url,
            "license_url": license_url,
            "cover_image_url": cover_image_url,
        }
        payload.update({k: v for k, v in optional.items() if v is not None})
        return await self._connection.post(payload, "models")

    async def search(self, query: str) -> Page:
        """Searches public models with the ``QUERY`` method."""
        response = await self._connection.make_request(
            query,
            "models",
            method="QUERY",
            headers={"Content-Type": "text/plain"},
        )
        return Page.from_json(response)
