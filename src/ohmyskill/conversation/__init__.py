"""Conversation driver — supervisor, stream assembly, decoding, transcript."""

from ohmyskill.conversation.assembler import LineAssembler
from ohmyskill.conversation.decoder import decode
from ohmyskill.conversation.models import (
    CapabilityInvocationEvent,
    DecodedEvent,
    DeltaEvent,
    FinalResultEvent,
    Message,
    ProcessOutcome,
    ProtocolErrorEvent,
    TurnContentEvent,
    UnrecognizedEvent,
)
from ohmyskill.conversation.session import ConversationSession
from ohmyskill.conversation.supervisor import ProcessSupervisor
from ohmyskill.conversation.transcript import TranscriptAccumulator

__all__ = [
    "CapabilityInvocationEvent",
    "ConversationSession",
    "DecodedEvent",
    "DeltaEvent",
    "FinalResultEvent",
    "LineAssembler",
    "Message",
    "ProcessOutcome",
    "ProcessSupervisor",
    "ProtocolErrorEvent",
    "TranscriptAccumulator",
    "TurnContentEvent",
    "UnrecognizedEvent",
    "decode",
]
