import pytest

from replicate_client.sse import (
    EventStreamParser,
    ReconnectInterval,
    ServerSentEvent,
)

STREAM = (
    "event: output\n"
    "id: 1\n"
    "data: Hello\n"
    "\n"
    ": keep-alive comment\n"
    "event: output\n"
    "data: multi\n"
    "data: line\n"
    "\n"
    "event: done\n"
    "data: {}\n"
    "\n"
)

EXPECTED = [
    ServerSentEvent(event="output", data="Hello", id="1"),
    ServerSentEvent(event="output", data="multi\nline"),
    ServerSentEvent(event="done", data="{}"),
]


def parse(*chunks):
    parser = EventStreamParser()
    items = []
    for chunk in chunks:
        items.extend(parser.feed(chunk))
    return items


def test_single_chunk():
    assert parse(STREAM) == EXPECTED


@pytest.mark.parametrize("line_ending", ["\r\n", "\r"])
def test_line_endings(line_ending):
    assert parse(STREAM.replace("\n", line_ending)) == EXPECTED


def test_split_at_every_offset():
    for crlf in [False, True]:
        text = STREAM.replace("\n", "\r\n") if crlf else STREAM
        for offset in range(len(text) + 1):
            assert parse(text[:offset], text[offset:]) == EXPECTED, offset


def test_one_character_at_a_time():
    text = STREAM.replace("\n", "\r\n")
    assert parse(*text) == EXPECTED


def test_crlf_split_between_chunks():
    assert parse("data: a\r", "\n\r\n") == [ServerSentEvent(data="a")]


def test_incomplete_event_is_held_back():
    parser = EventStreamParser()
    assert parser.feed("data: partial") == []
    assert parser.feed("\n") == []
    assert parser.feed("\n") == [ServerSentEvent(data="partial")]


def test_default_event_name():
    assert parse("data: x\n\n") == [ServerSentEvent(event="message", data="x")]


def test_id_does_not_carry_over():
    assert parse("id: 7\ndata: a\n\ndata: b\n\n") == [
        ServerSentEvent(data="a", id="7"),
        ServerSentEvent(data="b"),
    ]


def test_id_with_null_is_ignored():
    assert parse("id: a\0b\ndata: x\n\n") == [ServerSentEvent(data="x")]


def test_events_without_data_are_not_dispatched():
    assert parse("event: output\n\ndata: x\n\n") == [ServerSentEvent(data="x")]


def test_field_without_colon_and_space_handling():
    assert parse("data\ndata:no-space\ndata:  two\n\n") == [
        ServerSentEvent(data="\nno-space\n two")
    ]


def test_retry():
    assert parse("retry: 3000\nretry: soon\ndata: x\n\n") == [
        ReconnectInterval(3000),
        ServerSentEvent(data="x"),
    ]


def test_leading_bom_is_stripped():
    assert parse("\ufeffdata: x\n\n") == [ServerSentEvent(data="x")]
    # Only at the very start of the stream.
    assert parse("data: x\n\n", "\ufeffdata: y\n\n") == [
        ServerSentEvent(data="x"),
    ]


def test_reset_drops_partial_state():
    parser = EventStreamParser()
    parser.feed("event: error\ndata: half")
    parser.reset()
    assert parser.feed("data: x\n\n") == [ServerSentEvent(data="x")]


def test_str_only_renders_output():
    assert str(ServerSentEvent(event="output", data="token")) == "token"
    assert str(ServerSentEvent(event="logs", data="loading")) == ""


@pytest.mark.parametrize("value", ["²", "١٥٠٠", "12a"])
def test_non_ascii_digit_retry_is_ignored(value):
    assert parse(f"retry: {value}\ndata: x\n\n") == [ServerSentEvent(data="x")]
