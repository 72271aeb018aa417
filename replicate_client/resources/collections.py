from typing import Any, Dict

from ..pagination import Page
from ..url_utils import sanitize_field


class Collections:
    def __init__(self, connection):
        self._connection = connection

    async def get(self, collection_slug: str) -> Dict[str, Any]:
        return await self._connection.get(
            f"collections/{sanitize_field(collection_slug)}"
        )

    async def list(self) -> Page:
        response = await self._connection.get("collections")
        return Page.from_json(response)
