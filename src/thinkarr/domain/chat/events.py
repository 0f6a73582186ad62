"""Events produced by a chat turn, in the order a client receives them."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class TextDelta:
    content: str

    def to_payload(self) -> dict[str, Any]:
        return {"type": "text_delta", "content": self.content}


@dataclass(frozen=True, slots=True)
class ToolCallStart:
    tool_call_id: str
    tool_name: str
    arguments: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": "tool_call_start",
            "toolCallId": self.tool_call_id,
            "toolName": self.tool_name,
            "arguments": self.arguments,
        }


@dataclass(frozen=True, slots=True)
class ToolResult:
    tool_call_id: str
    tool_name: str
    result: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": "tool_result",
            "toolCallId": self.tool_call_id,
            "toolName": self.tool_name,
            "result": self.result,
        }


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    message: str

    def to_payload(self) -> dict[str, Any]:
        return {"type": "error", "message": self.message}


@dataclass(frozen=True, slots=True)
class Done:
    message_id: str

    def to_payload(self) -> dict[str, Any]:
        return {"type": "done", "messageId": self.message_id}


ChatEvent = TextDelta | ToolCallStart | ToolResult | ErrorEvent | Done
