from typing import Any, Dict, List


class Hardware:
    def __init__(self, connection):
        self._connection = connection

    async def list(self) -> List[Dict[str, Any]]:
        """Hardware SKUs available for models and deployments."""
        return await self._connection.get("hardware")
