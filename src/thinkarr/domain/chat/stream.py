"""Server-sent events framing for chat turns.

Each event goes out as ``data: <json>\\n\\n`` and the stream always ends with
``data: [DONE]\\n\\n``, also after an error or a tool round limit.
"""

import json
from collections.abc import AsyncIterable, AsyncIterator

from thinkarr.domain.chat.events import ChatEvent, ErrorEvent
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)

DONE_SENTINEL = "data: [DONE]\n\n"


def encode_event(event: ChatEvent) -> str:
    return f"data: {json.dumps(event.to_payload())}\n\n"


async def sse_stream(events: AsyncIterable[ChatEvent]) -> AsyncIterator[str]:
    """Frame orchestrator events for the wire.

    An unexpected exception escaping the orchestrator becomes one ``error``
    event. Cancellation propagates and no sentinel is sent.
    """
    try:
        async for event in events:
            yield encode_event(event)
    except Exception as e:
        logger.exception("chat_stream_failed")
        yield encode_event(ErrorEvent(message=str(e) or "Internal error"))
    yield DONE_SENTINEL
