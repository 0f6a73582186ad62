"""Unit tests for SSE framing of chat events."""

import json
from collections.abc import AsyncIterator

import pytest

from thinkarr.domain.chat.events import Done, ErrorEvent, TextDelta, ToolCallStart, ToolResult
from thinkarr.domain.chat.stream import DONE_SENTINEL, encode_event, sse_stream


async def collect(stream: AsyncIterator[str]) -> list[str]:
    return [frame async for frame in stream]


def decode(frame: str) -> dict:
    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    return json.loads(frame[len("data: ") : -2])


class TestEncodeEvent:
    @pytest.mark.parametrize(
        ("event", "payload"),
        [
            (TextDelta(content="Hi"), {"type": "text_delta", "content": "Hi"}),
            (
                ToolCallStart(tool_call_id="c1", tool_name="plex_get_on_deck", arguments="{}"),
                {
                    "type": "tool_call_start",
                    "toolCallId": "c1",
                    "toolName": "plex_get_on_deck",
                    "arguments": "{}",
                },
            ),
            (
                ToolResult(tool_call_id="c1", tool_name="plex_get_on_deck", result="[]"),
                {
                    "type": "tool_result",
                    "toolCallId": "c1",
                    "toolName": "plex_get_on_deck",
                    "result": "[]",
                },
            ),
            (ErrorEvent(message="Tool call limit reached"), {
                "type": "error",
                "message": "Tool call limit reached",
            }),
            (Done(message_id="m1"), {"type": "done", "messageId": "m1"}),
        ],
    )
    def test_wire_format(self, event, payload) -> None:
        assert decode(encode_event(event)) == payload

    def test_newlines_in_content_stay_inside_one_frame(self) -> None:
        frame = encode_event(TextDelta(content="line one\n\nline two"))
        assert frame.count("\n\n") == 1
        assert decode(frame)["content"] == "line one\n\nline two"


class TestSseStream:
    async def test_done_sentinel_terminates_stream(self) -> None:
        async def events():
            yield TextDelta(content="Hello")
            yield Done(message_id="m1")

        frames = await collect(sse_stream(events()))

        assert len(frames) == 3
        assert decode(frames[0])["content"] == "Hello"
        assert frames[-1] == DONE_SENTINEL == "data: [DONE]\n\n"

    async def test_sentinel_follows_error_event(self) -> None:
        async def events():
            yield ErrorEvent(message="Tool call limit reached")

        frames = await collect(sse_stream(events()))

        assert decode(frames[0])["type"] == "error"
        assert frames[-1] == DONE_SENTINEL

    async def test_unexpected_exception_becomes_error_event(self) -> None:
        async def events():
            yield TextDelta(content="partial")
            raise RuntimeError("database is locked")

        frames = await collect(sse_stream(events()))

        assert decode(frames[1]) == {"type": "error", "message": "database is locked"}
        assert frames[-1] == DONE_SENTINEL
