"""Pydantic v2 models for transcript messages and decoded stream events."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag

Role = Literal["user", "assistant"]


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class Message(BaseModel):
    """One entry of the conversation transcript.

    ``content`` is mutated in place while an assistant turn is still
    accumulating; ``open`` marks that turn.
    """

    id: str = Field(default_factory=_new_id, description="Stable message id")
    role: Role = Field(description="Who produced the message")
    content: str = Field(default="", description="Message text")
    created_at: datetime = Field(default_factory=_utc_now)
    open: bool = Field(
        default=False,
        description="Assistant turn still accepting appended text",
    )


# ------------------------------------------------------------------ #
# Decoded events
# ------------------------------------------------------------------ #


class _DecodedBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class TurnContentEvent(_DecodedBase):
    """Text content of one assistant turn."""

    kind: Literal["turn_content"] = "turn_content"
    turn_id: str | None = Field(
        default=None, description="Model turn identifier (message.id)"
    )
    text: str


class FinalResultEvent(_DecodedBase):
    """Authoritative terminal answer for the exchange."""

    kind: Literal["final_result"] = "final_result"
    text: str


class CapabilityInvocationEvent(_DecodedBase):
    """The agent invoked a named tool/capability."""

    kind: Literal["capability_invocation"] = "capability_invocation"
    name: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class DeltaEvent(_DecodedBase):
    """Incremental text for the open assistant turn."""

    kind: Literal["delta"] = "delta"
    text: str


class ProtocolErrorEvent(_DecodedBase):
    """Explicit error reported by the agent."""

    kind: Literal["protocol_error"] = "protocol_error"
    message: str


class UnrecognizedEvent(_DecodedBase):
    """Well-formed record whose discriminant is not handled."""

    kind: Literal["unrecognized"] = "unrecognized"
    event_type: str = ""


def _kind_discriminator(v: Any) -> str:
    if isinstance(v, dict):
        return str(v.get("kind", ""))
    return str(getattr(v, "kind", ""))


DecodedEvent = Annotated[
    Annotated[TurnContentEvent, Tag("turn_content")]
    | Annotated[FinalResultEvent, Tag("final_result")]
    | Annotated[CapabilityInvocationEvent, Tag("capability_invocation")]
    | Annotated[DeltaEvent, Tag("delta")]
    | Annotated[ProtocolErrorEvent, Tag("protocol_error")]
    | Annotated[UnrecognizedEvent, Tag("unrecognized")],
    Discriminator(_kind_discriminator),
]
"""Closed union of everything the decoder can produce."""


class ProcessOutcome(BaseModel):
    """Result of one supervised agent run."""

    returncode: int | None = Field(description="Exit code, None if never reaped")
    output: str = Field(default="", description="Everything read from the process")
    cancelled: bool = Field(default=False)
