"""Server-Sent-Events decoding for the two vendor stream dialects.

The decoder is pull-based: it consumes an async line source and produces
events, keeping only the most recently seen event name as state. A dialect
is a dispatch table from event name to a handler; a handler returns a text
fragment, None to skip the event, or STOP to end the stream cleanly.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, AsyncIterable, AsyncIterator, Callable, Mapping

from tier_router.errors import ApiError

STOP = object()

Handler = Callable[[str], Any]


@dataclass(frozen=True)
class SSEEvent:
    event: str
    data: str


class SSEDecoder:
    """Line-at-a-time SSE state machine."""

    def __init__(self) -> None:
        self.event = ""

    def feed(self, line: str) -> SSEEvent | None:
        line = line.rstrip("\r\n")
        if not line or line.startswith(":"):
            return None

        field, sep, value = line.partition(":")
        if not sep:
            return None
        if value.startswith(" "):
            value = value[1:]

        if field == "event":
            self.event = value
            return None
        if field == "data":
            return SSEEvent(self.event, value)
        return None

    async def aiter_events(self, lines: AsyncIterable[str]) -> AsyncIterator[SSEEvent]:
        async for line in lines:
            event = self.feed(line)
            if event is not None:
                yield event


class SSEDialect:
    def __init__(self, name: str, handlers: Mapping[str, Handler], default: Handler | None = None):
        self.name = name
        self._handlers = dict(handlers)
        self._default = default

    def handle(self, event: SSEEvent) -> Any:
        handler = self._handlers.get(event.event, self._default)
        if handler is None:
            return None
        return handler(event.data)

    def __repr__(self) -> str:
        return f"SSEDialect({self.name!r})"


def _loads(data: str) -> Any:
    try:
        return json.loads(data)
    except ValueError:
        return None


# --- Dialect A: "data: {json}" lines, "data: [DONE]" sentinel ---

def _chat_completion_chunk(data: str) -> Any:
    if data.strip() == "[DONE]":
        return STOP
    chunk = _loads(data)
    if not isinstance(chunk, dict):
        return None
    choices = chunk.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    delta = choices[0].get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) and content else None


CHAT_COMPLETIONS_DIALECT = SSEDialect("chat-completions", {}, default=_chat_completion_chunk)


# --- Dialect B: "event: <name>" then "data: {json}", ended by message_stop ---

def _content_block_delta(data: str) -> Any:
    payload = _loads(data)
    if not isinstance(payload, dict):
        return None
    delta = payload.get("delta")
    if not isinstance(delta, dict):
        return None
    text = delta.get("text")
    return text if isinstance(text, str) and text else None


def _message_stop(data: str) -> Any:
    return STOP


def _stream_error(data: str) -> Any:
    raise ApiError(f"Stream error: {data}")


MESSAGES_DIALECT = SSEDialect(
    "messages",
    {
        "content_block_delta": _content_block_delta,
        "message_stop": _message_stop,
        "error": _stream_error,
    },
)


async def decode_stream(lines: AsyncIterable[str], dialect: SSEDialect) -> AsyncIterator[str]:
    """Yield text fragments until the dialect's terminator or end of input.

    End of input without a terminator is a normal end. The line source is
    closed on every exit path, including consumer cancellation.
    """
    try:
        async for event in SSEDecoder().aiter_events(lines):
            result = dialect.handle(event)
            if result is STOP:
                return
            if result:
                yield result
    finally:
        aclose = getattr(lines, "aclose", None)
        if aclose is not None:
            await aclose()
