from typing import Any, Dict


class Webhooks:
    def __init__(self, connection):
        self._connection = connection

    async def default_secret(self) -> Dict[str, Any]:
        """The signing secret of the default webhook, as ``{"key": "whsec_..."}``.

        Use it with :func:`replicate_client.webhooks.validate_webhook`.
        """
        return await self._connection.get("webhooks/default/secret")
