import base64
import io
import mimetypes
import os
from typing import Any, Callable

from .constants import MAX_DATA_URI_SIZE
from .errors import InvalidInputError

DEFAULT_MIME_TYPE = "application/octet-stream"


def _is_binary_file(value: Any) -> bool:
    return isinstance(value, io.IOBase) and not isinstance(
        value, io.TextIOBase
    )


def _transform(value: Any, mapper: Callable[[Any], Any]) -> Any:
    if isinstance(value, dict):
        return {key: _transform(item, mapper) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_transform(item, mapper) for item in value]
    return mapper(value)


def to_data_uri(data: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def transform_file_inputs(inputs: Any, max_size: int = MAX_DATA_URI_SIZE) -> Any:
    """Replaces raw bytes and binary files anywhere in ``inputs`` with data URIs.

    Files are read from their current position. Their MIME type is guessed from
    the file name, falling back to ``application/octet-stream``. Everything else is
    left untouched.

    Raises:
        InvalidInputError: the combined size of the encoded files exceeds
            ``max_size`` bytes. Upload large files and pass their URLs instead.
    """
    total_bytes = 0

    def encode(value: Any) -> Any:
        nonlocal total_bytes
        mime_type = DEFAULT_MIME_TYPE
        if isinstance(value, (bytes, bytearray, memoryview)):
            data = bytes(value)
        elif _is_binary_file(value):
            data = value.read()
            name = getattr(value, "name", None)
            if isinstance(name, str):
                mime_type = (
                    mimetypes.guess_type(os.path.basename(name))[0]
                    or DEFAULT_MIME_TYPE
                )
        else:
            return value

        total_bytes += len(data)
        if total_bytes > max_size:
            raise InvalidInputError(
                f"Combined filesize of prediction {total_bytes} bytes exceeds {max_size // 1_000_000}mb limit for inline encoding, please provide URLs instead"
            )
        return to_data_uri(data, mime_type)

    return _transform(inputs, encode)
