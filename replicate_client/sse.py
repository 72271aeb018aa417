"""Incremental parser for ``text/event-stream`` bodies.

Chunks may be split anywhere, including in the middle of a line or between the
``\\r`` and ``\\n`` of a line ending. Incomplete lines are kept until a later chunk
terminates them. Events follow the WHATWG framing: ``field: value`` lines, a blank
line ends an event, repeated ``data`` lines are joined with newlines.

The ``id`` of an event does not carry over to the events after it.
"""
from dataclasses import dataclass
from typing import Iterator, List, Optional, Union

BOM = "\ufeff"
DEFAULT_EVENT_NAME = "message"


@dataclass(frozen=True)
class ServerSentEvent:
    event: str = DEFAULT_EVENT_NAME
    data: str = ""
    id: Optional[str] = None
    retry: Optional[int] = None

    def __str__(self):
        if self.event == "output":
            return self.data
        return ""


@dataclass(frozen=True)
class ReconnectInterval:
    """A ``retry`` field: the server's suggested reconnect delay in milliseconds."""

    value: int


ParsedItem = Union[ServerSentEvent, ReconnectInterval]


class EventStreamParser:
    def __init__(self):
        self.reset()

    def reset(self):
        """Drops buffered text and any partially accumulated event."""
        self._is_first_chunk = True
        self._buffer = ""
        self._scanned = 0
        self._discard_leading_newline = False
        self._event_id: Optional[str] = None
        self._event_name: Optional[str] = None
        self._data: List[str] = []

    def feed(self, chunk: str) -> List[ParsedItem]:
        """Consumes a chunk of text and returns everything it completed, in order."""
        if not chunk:
            return []
        if self._is_first_chunk and chunk.startswith(BOM):
            chunk = chunk[len(BOM) :]
        self._is_first_chunk = False

        buffer = self._buffer + chunk
        length = len(buffer)
        position = 0
        parsed: List[ParsedItem] = []
        while position < length:
            if self._discard_leading_newline:
                self._discard_leading_newline = False
                if buffer[position] == "\n":
                    position += 1
                continue

            end = self._find_line_end(buffer, max(position, self._scanned))
            if end < 0:
                # No terminator yet, wait for the next chunk.
                self._scanned = length
                break
            self._scanned = 0
            if buffer[end] == "\r":
                self._discard_leading_newline = True
            parsed.extend(self._parse_line(buffer[position:end]))
            position = end + 1

        self._buffer = buffer[position:]
        self._scanned = max(0, self._scanned - position)
        return parsed

    @staticmethod
    def _find_line_end(buffer: str, start: int) -> int:
        ends = [
            index
            for index in (buffer.find("\r", start), buffer.find("\n", start))
            if index >= 0
        ]
        return min(ends) if ends else -1

    def _parse_line(self, line: str) -> Iterator[ParsedItem]:
        if not line:
            yield from self._dispatch()
            return

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "data":
            self._data.append(value)
        elif field == "event":
            self._event_name = value
        elif field == "id":
            if "\0" not in value:
                self._event_id = value
        elif field == "retry":
            if value.isascii() and value.isdigit():
                yield ReconnectInterval(int(value))
        # Comments (empty field name) and unknown fields are ignored.

    def _dispatch(self) -> Iterator[ServerSentEvent]:
        if self._data:
            yield ServerSentEvent(
                event=self._event_name or DEFAULT_EVENT_NAME,
                data="\n".join(self._data),
                id=self._event_id,
            )
            self._data = []
            self._event_id = None
        self._event_name = None
