import io
import json
import mimetypes
import os
import time
from typing import Any, BinaryIO, Dict, Optional, Union

from ..async_utils import FileFormField
from ..errors import InvalidInputError
from ..file_inputs import DEFAULT_MIME_TYPE
from ..pagination import Page
from ..url_utils import sanitize_field


class Files:
    """Routes under ``/files``."""

    def __init__(self, connection):
        self._connection = connection

    async def create(
        self,
        file: Union[bytes, BinaryIO],
        metadata: Optional[Dict[str, Any]] = None,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Uploads a file as multipart form data.

        Parameters:
            file: raw bytes or a file opened in binary mode
            metadata: user provided JSON metadata stored with the file
            filename: defaults to the file's name, or ``buffer_<timestamp>``
            content_type: defaults to a guess from the file name
        """
        if isinstance(file, (bytes, bytearray)):
            data = bytes(file)
            filename = filename or f"buffer_{int(time.time() * 1000)}"
        elif isinstance(file, io.IOBase) and not isinstance(file, io.TextIOBase):
            data = file.read()
            name = getattr(file, "name", None)
            filename = filename or (
                os.path.basename(name)
                if isinstance(name, str)
                else f"blob_{int(time.time() * 1000)}"
            )
        else:
            raise InvalidInputError(
                "Invalid file argument, must be bytes or a binary file object"
            )
        content_type = (
            content_type
            or mimetypes.guess_type(filename)[0]
            or DEFAULT_MIME_TYPE
        )

        fields = [
            FileFormField(
                name="content",
                value=data,
                filename=filename,
                content_type=content_type,
            ),
            FileFormField(
                name="metadata",
                value=json.dumps(metadata or {}),
                content_type="application/json",
            ),
        ]
        return await self._connection.post(fields, "files")

    async def list(self) -> Page:
        response = await self._connection.get("files")
        return Page.from_json(response)

    async def get(self, file_id: str) -> Dict[str, Any]:
        return await self._connection.get(f"files/{sanitize_field(file_id)}")

    async def delete(self, file_id: str) -> bool:
        response = await self._connection.make_request(
            None,
            f"files/{sanitize_field(file_id)}",
            method="DELETE",
            return_raw_response=True,
        )
        response.release()
        return response.status == 204
