"""Transcript accumulator — append-or-merge rules for decoded events."""

from __future__ import annotations

import logging

from ohmyskill.constants import ASK_USER_CAPABILITY
from ohmyskill.conversation.models import (
    CapabilityInvocationEvent,
    DecodedEvent,
    DeltaEvent,
    FinalResultEvent,
    Message,
    ProtocolErrorEvent,
    TurnContentEvent,
)

logger = logging.getLogger(__name__)


class TranscriptAccumulator:
    """Ordered conversation history with per-cycle turn deduplication.

    Single writer: only the session's event-loop callbacks call
    :meth:`apply`.  Readers should use :meth:`snapshot`.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._seen_turns: set[str] = set()

    # ------------------------------------------------------------------ #
    # Read access
    # ------------------------------------------------------------------ #

    @property
    def messages(self) -> list[Message]:
        return self._messages

    def snapshot(self) -> list[Message]:
        """Deep copies of every message, safe to hand to a renderer."""
        return [m.model_copy(deep=True) for m in self._messages]

    def __len__(self) -> int:
        return len(self._messages)

    # ------------------------------------------------------------------ #
    # Cycle control
    # ------------------------------------------------------------------ #

    def begin_cycle(self) -> None:
        """Start a new send cycle: forget seen turns, close the open turn."""
        self._seen_turns.clear()
        self.close_open_turn()

    def close_open_turn(self) -> None:
        last = self._last_open()
        if last is not None:
            last.open = False

    def add_user_message(self, text: str) -> Message:
        self.close_open_turn()
        message = Message(role="user", content=text)
        self._messages.append(message)
        return message

    # ------------------------------------------------------------------ #
    # Event application
    # ------------------------------------------------------------------ #

    def apply(self, event: DecodedEvent) -> str | None:
        """Apply *event* to the transcript.

        Returns diagnostic text for ``protocol_error`` events, ``None``
        otherwise.
        """
        if isinstance(event, TurnContentEvent):
            if event.turn_id is not None:
                if event.turn_id in self._seen_turns:
                    logger.debug("ignoring repeated turn %s", event.turn_id)
                    return None
                self._seen_turns.add(event.turn_id)
            self._append_text(event.text)

        elif isinstance(event, DeltaEvent):
            self._append_text(event.text)

        elif isinstance(event, FinalResultEvent):
            # Never merged into the running turn.
            self.close_open_turn()
            self._messages.append(Message(role="assistant", content=event.text))

        elif isinstance(event, CapabilityInvocationEvent):
            if event.name == ASK_USER_CAPABILITY:
                # Non-interactive runs cannot answer; the agent falls back
                # to asking in plain text, which arrives as turn content.
                logger.debug("agent asked a question; awaiting plain-text fallback")
            else:
                logger.debug("agent invoked %s", event.name)

        elif isinstance(event, ProtocolErrorEvent):
            return event.message

        return None

    def _append_text(self, text: str) -> None:
        last = self._last_open()
        if last is not None:
            last.content += text
            return
        self._messages.append(Message(role="assistant", content=text, open=True))

    def _last_open(self) -> Message | None:
        if not self._messages:
            return None
        last = self._messages[-1]
        if last.role == "assistant" and last.open:
            return last
        return None
