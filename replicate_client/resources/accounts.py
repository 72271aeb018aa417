from typing import Any, Dict


class Accounts:
    def __init__(self, connection):
        self._connection = connection

    async def current(self) -> Dict[str, Any]:
        """The account the API token belongs to."""
        return await self._connection.get("account")
