"""Chat domain: tool-calling orchestration and event streaming."""

from thinkarr.domain.chat.events import (
    ChatEvent,
    Done,
    ErrorEvent,
    TextDelta,
    ToolCallStart,
    ToolResult,
)
from thinkarr.domain.chat.orchestrator import (
    MAX_TOOL_ROUNDS,
    TOOL_LIMIT_MESSAGE,
    ChatOrchestrator,
    Turn,
    TurnRequest,
)
from thinkarr.domain.chat.stream import DONE_SENTINEL, encode_event, sse_stream

__all__ = [
    # Events
    "ChatEvent",
    "Done",
    "ErrorEvent",
    "TextDelta",
    "ToolCallStart",
    "ToolResult",
    # Orchestrator
    "MAX_TOOL_ROUNDS",
    "TOOL_LIMIT_MESSAGE",
    "ChatOrchestrator",
    "Turn",
    "TurnRequest",
    # Streaming
    "DONE_SENTINEL",
    "encode_event",
    "sse_stream",
]
