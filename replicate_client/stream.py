import asyncio
import codecs
import dataclasses
from typing import AsyncIterator, Optional

import aiohttp

from .constants import EVENT_STREAM_CONTENT_TYPE
from .errors import ReplicateTransportError
from .logger import logger
from .sse import EventStreamParser, ReconnectInterval, ServerSentEvent

TERMINAL_EVENTS = {"done", "error"}

STREAM_FAILURES = (aiohttp.ClientError, asyncio.TimeoutError, ConnectionError)


async def _read(chunks) -> Optional[bytes]:
    try:
        return await chunks.__anext__()
    except StopAsyncIteration:
        return None


async def _next_chunk(chunks, signal: Optional[asyncio.Event]) -> Optional[bytes]:
    """Reads one chunk, or returns None once the body ends or ``signal`` is set."""
    if signal is None:
        return await _read(chunks)
    if signal.is_set():
        return None

    read = asyncio.ensure_future(_read(chunks))
    canceled = asyncio.ensure_future(signal.wait())
    try:
        await asyncio.wait({read, canceled}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (read, canceled):
            if not task.done():
                task.cancel()
        await asyncio.gather(read, canceled, return_exceptions=True)

    if signal.is_set():
        return None
    return read.result()


async def stream_events(
    connection, url: str, signal: Optional[asyncio.Event] = None
) -> AsyncIterator[ServerSentEvent]:
    """Yields the server-sent events of a job's ``stream`` URL.

    The sequence is single pass and pull based: a chunk is read only once every
    event parsed from the previous one has been consumed. It ends when the server
    closes the connection, after a ``done`` or ``error`` event, or as soon as
    ``signal`` is set, in which case the connection is closed and nothing more is
    yielded.

    Parameters:
        connection: the :class:`~replicate_client.connection.Connection` to use
        url: the job's ``urls.stream`` link
        signal: optional cancellation event

    Raises:
        ReplicateTransportError: the connection failed mid-stream
    """
    if signal is not None and signal.is_set():
        return

    response = await connection.request(
        "GET",
        url,
        headers={
            "Accept": EVENT_STREAM_CONTENT_TYPE,
            "Cache-Control": "no-store",
        },
        stream=True,
    )
    parser = EventStreamParser()
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    retry: Optional[int] = None
    chunks = response.content.iter_any().__aiter__()

    try:
        while True:
            try:
                chunk = await _next_chunk(chunks, signal)
            except STREAM_FAILURES as e:
                raise ReplicateTransportError(url, "GET", e) from e

            if chunk is None:
                if signal is not None and signal.is_set():
                    logger.info("Stream from %s canceled", url)
                    return
                text = decoder.decode(b"", final=True)
            else:
                text = decoder.decode(chunk)

            for item in parser.feed(text):
                if signal is not None and signal.is_set():
                    logger.info("Stream from %s canceled", url)
                    return
                if isinstance(item, ReconnectInterval):
                    retry = item.value
                    continue
                event = item
                if retry is not None:
                    event = dataclasses.replace(item, retry=retry)
                yield event
                if event.event in TERMINAL_EVENTS:
                    return

            if chunk is None:
                return
    finally:
        response.close()
