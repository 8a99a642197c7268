"""Tests for the transcript accumulator."""

from __future__ import annotations

from ohmyskill.conversation.decoder import decode
from ohmyskill.conversation.models import (
    CapabilityInvocationEvent,
    DeltaEvent,
    FinalResultEvent,
    ProtocolErrorEvent,
    TurnContentEvent,
    UnrecognizedEvent,
)
from ohmyskill.conversation.transcript import TranscriptAccumulator


def _contents(acc: TranscriptAccumulator) -> list[tuple[str, str]]:
    return [(m.role, m.content) for m in acc.messages]


class TestTurnContent:
    def test_first_turn_creates_open_message(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(TurnContentEvent(turn_id="t1", text="Hello"))
        assert _contents(acc) == [("assistant", "Hello")]
        assert acc.messages[-1].open is True

    def test_repeated_turn_is_ignored(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(TurnContentEvent(turn_id="t1", text="Hello"))
        acc.apply(TurnContentEvent(turn_id="t1", text="Hello"))
        assert _contents(acc) == [("assistant", "Hello")]

    def test_new_turn_appends_to_open_message(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(TurnContentEvent(turn_id="t1", text="Hello"))
        acc.apply(TurnContentEvent(turn_id="t2", text=" again"))
        assert _contents(acc) == [("assistant", "Hello again")]

    def test_turn_without_id_is_never_deduplicated(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(TurnContentEvent(text="a"))
        acc.apply(TurnContentEvent(text="a"))
        assert _contents(acc) == [("assistant", "aa")]

    def test_seen_set_resets_each_cycle(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(TurnContentEvent(turn_id="t1", text="first"))
        acc.begin_cycle()
        acc.add_user_message("again")
        acc.apply(TurnContentEvent(turn_id="t1", text="second"))
        assert _contents(acc) == [
            ("assistant", "first"),
            ("user", "again"),
            ("assistant", "second"),
        ]

    def test_user_message_closes_open_turn(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(DeltaEvent(text="partial"))
        acc.add_user_message("next")
        assert acc.messages[0].open is False
        assert acc.messages[1].role == "user"


class TestDelta:
    def test_deltas_merge(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(DeltaEvent(text="Hel"))
        acc.apply(DeltaEvent(text="lo"))
        assert _contents(acc) == [("assistant", "Hello")]

    def test_delta_after_closed_turn_starts_new_message(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(DeltaEvent(text="one"))
        acc.close_open_turn()
        acc.apply(DeltaEvent(text="two"))
        assert _contents(acc) == [("assistant", "one"), ("assistant", "two")]


class TestFinalResult:
    def test_never_merged_into_open_turn(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(TurnContentEvent(turn_id="t1", text="partial"))
        acc.apply(FinalResultEvent(text="Done"))
        assert _contents(acc) == [("assistant", "partial"), ("assistant", "Done")]
        assert all(m.open is False for m in acc.messages)

    def test_text_after_result_starts_new_message(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(FinalResultEvent(text="Done"))
        acc.apply(DeltaEvent(text="more"))
        assert _contents(acc) == [("assistant", "Done"), ("assistant", "more")]

    def test_scenario_from_wire(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(DeltaEvent(text="partial"))
        event = decode('{"type":"result","result":"Done"}')
        assert event is not None
        acc.apply(event)
        assert [m.content for m in acc.messages] == ["partial", "Done"]


class TestNonContentEvents:
    def test_ask_user_question_appends_nothing(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(DeltaEvent(text="Let me check."))
        result = acc.apply(
            CapabilityInvocationEvent(name="AskUserQuestion", parameters={"q": "?"})
        )
        assert result is None
        assert [m.content for m in acc.messages] == ["Let me check."]
        assert acc.messages[-1].open is True

    def test_other_invocation_appends_nothing(self) -> None:
        acc = TranscriptAccumulator()
        assert acc.apply(CapabilityInvocationEvent(name="Bash")) is None
        assert len(acc) == 0

    def test_protocol_error_returns_diagnostic(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(DeltaEvent(text="x"))
        assert acc.apply(ProtocolErrorEvent(message="boom")) == "boom"
        assert _contents(acc) == [("assistant", "x")]
        assert acc.messages[0].open is True

    def test_unrecognized_is_noop(self) -> None:
        acc = TranscriptAccumulator()
        assert acc.apply(UnrecognizedEvent(event_type="system")) is None
        assert len(acc) == 0


class TestSnapshot:
    def test_snapshot_is_detached(self) -> None:
        acc = TranscriptAccumulator()
        acc.apply(DeltaEvent(text="a"))
        snap = acc.snapshot()
        acc.apply(DeltaEvent(text="b"))
        assert snap[0].content == "a"
        assert acc.messages[0].content == "ab"
        assert snap[0].id == acc.messages[0].id
