"""Event decoder for the Claude CLI ``stream-json`` output format."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from ohmyskill.conversation.models import (
    CapabilityInvocationEvent,
    DecodedEvent,
    DeltaEvent,
    FinalResultEvent,
    ProtocolErrorEvent,
    TurnContentEvent,
    UnrecognizedEvent,
)

logger = logging.getLogger(__name__)


def decode(line: str | bytes) -> DecodedEvent | None:
    """Parse one output line into a typed event.

    Returns ``None`` for anything that is not a JSON object carrying a
    string ``type`` field.  The agent interleaves diagnostics and lifecycle
    noise with content, so malformed input is expected and never raises.
    """
    if isinstance(line, bytes):
        line = line.decode(errors="replace")
    line = line.strip()
    if not line:
        return None

    try:
        record = json.loads(line)
    except (ValueError, RecursionError):
        logger.debug("dropping non-JSON line: %s", line[:200])
        return None

    if not isinstance(record, dict):
        return None
    event_type = record.get("type")
    if not isinstance(event_type, str) or not event_type:
        return None

    handler = _HANDLERS.get(event_type)
    if handler is None:
        return UnrecognizedEvent(event_type=event_type)
    return handler(record)


# ------------------------------------------------------------------ #
# Per-discriminant handlers
# ------------------------------------------------------------------ #


def _decode_assistant(record: dict[str, Any]) -> DecodedEvent:
    """``assistant`` wraps an API message with ``message.content[]`` blocks.

    Text blocks are joined into one turn; a message made only of
    ``tool_use`` blocks becomes a capability invocation.
    """
    message = record.get("message")
    if not isinstance(message, dict):
        return UnrecognizedEvent(event_type="assistant")

    turn_id = message.get("id")
    if not isinstance(turn_id, str) or not turn_id:
        turn_id = None

    blocks = message.get("content")
    if isinstance(blocks, str):
        blocks = [{"type": "text", "text": blocks}]
    if not isinstance(blocks, list):
        return UnrecognizedEvent(event_type="assistant")

    texts: list[str] = []
    invocation: CapabilityInvocationEvent | None = None
    for block in blocks:
        if not isinstance(block, dict):
            continue
        block_type = block.get("type")
        if block_type == "text":
            text = block.get("text")
            if isinstance(text, str) and text:
                texts.append(text)
        elif block_type == "tool_use" and invocation is None:
            name = block.get("name")
            if not isinstance(name, str) or not name:
                continue
            params = block.get("input")
            invocation = CapabilityInvocationEvent(
                name=name,
                parameters=params if isinstance(params, dict) else {},
            )

    if texts:
        return TurnContentEvent(turn_id=turn_id, text="".join(texts))
    if invocation is not None:
        return invocation
    return UnrecognizedEvent(event_type="assistant")


def _decode_result(record: dict[str, Any]) -> DecodedEvent:
    result = record.get("result")
    text = result if isinstance(result, str) else ""
    if record.get("is_error") is True:
        subtype = record.get("subtype")
        detail = text or (subtype if isinstance(subtype, str) else "")
        return ProtocolErrorEvent(message=detail or "agent reported an error")
    if not text:
        return UnrecognizedEvent(event_type="result")
    return FinalResultEvent(text=text)


def _decode_stream_event(record: dict[str, Any]) -> DecodedEvent:
    """Partial-message events (``--include-partial-messages``)."""
    event = record.get("event")
    if isinstance(event, dict):
        delta = event.get("delta")
        if isinstance(delta, dict) and delta.get("type") == "text_delta":
            text = delta.get("text")
            if isinstance(text, str) and text:
                return DeltaEvent(text=text)
    return UnrecognizedEvent(event_type="stream_event")


def _decode_error(record: dict[str, Any]) -> DecodedEvent:
    message = record.get("message")
    error = record.get("error")
    if not isinstance(message, str) or not message:
        if isinstance(error, dict):
            message = error.get("message")
        elif isinstance(error, str):
            message = error
    if not isinstance(message, str) or not message:
        message = "agent reported an error"
    return ProtocolErrorEvent(message=message)


_HANDLERS: dict[str, Callable[[dict[str, Any]], DecodedEvent]] = {
    "assistant": _decode_assistant,
    "result": _decode_result,
    "stream_event": _decode_stream_event,
    "error": _decode_error,
}
