import asyncio
from dataclasses import dataclass
from typing import Awaitable, Optional, Sequence, TypeVar, Union

import aiohttp
import nest_asyncio

T = TypeVar("T")


@dataclass
class FileFormField:
    name: str
    value: Union[bytes, str]
    filename: Optional[str] = None
    content_type: Optional[str] = None


FileFormData = Sequence[FileFormField]


def build_form_data(fields: FileFormData) -> aiohttp.FormData:
    """Builds a fresh multipart body.

    Form data can only be consumed once, so a new one must be built for every
    attempt of a retried request.
    see https://github.com/Rapptz/discord.py/issues/6531
    """
    form = aiohttp.FormData()
    for field in fields:
        form.add_field(
            name=field.name,
            value=field.value,
            filename=field.filename,
            content_type=field.content_type,
        )
    return form


_loop: Optional[asyncio.AbstractEventLoop] = None


def get_event_loop():
    global _loop  # pylint: disable=global-statement
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # no event loop running:
        # Reused across calls so the default aiohttp session stays on one loop.
        if _loop is None or _loop.is_closed():
            _loop = asyncio.new_event_loop()
        loop = _loop
    else:
        nest_asyncio.apply(loop)
    return loop


def run_until_complete(coroutine: Awaitable[T]) -> T:
    """Runs a coroutine from synchronous code, including inside notebooks
    where an event loop is already running."""
    loop = get_event_loop()
    return loop.run_until_complete(coroutine)
