"""Tests for the chat TUI helpers and the ask transcript printer."""

from __future__ import annotations

from pathlib import Path

import pytest

from ohmyskill.commands.ask import TranscriptPrinter
from ohmyskill.commands.chat import (
    ChatApp,
    digit_choice,
    move_selection,
    picker_query,
    split_skill_command,
)
from ohmyskill.conversation.session import ConversationSession
from ohmyskill.skills.catalog import SkillCatalog
from ohmyskill.skills.scanner import Skill


@pytest.fixture
def catalog(tmp_path: Path) -> SkillCatalog:
    return SkillCatalog(
        [
            Skill(id="pdf", name="pdf", description="Fill PDF forms", directory=tmp_path),
            Skill(id="review", name="code-review", directory=tmp_path),
        ]
    )


def test_split_skill_command(catalog: SkillCatalog):
    skill, text = split_skill_command("/pdf fill this form", catalog)
    assert skill is not None
    assert skill.id == "pdf"
    assert text == "fill this form"


def test_split_skill_command_without_text(catalog: SkillCatalog):
    skill, text = split_skill_command("/code-review", catalog)
    assert skill is not None
    assert skill.id == "review"
    assert text == ""


def test_split_skill_command_unknown_or_plain(catalog: SkillCatalog):
    assert split_skill_command("/ghost hi", catalog) == (None, "/ghost hi")
    assert split_skill_command("hello /pdf", catalog) == (None, "hello /pdf")
    assert split_skill_command("/", catalog) == (None, "/")


def test_picker_query():
    assert picker_query("/") == ""
    assert picker_query("/pd") == "pd"
    assert picker_query("/pdf now") is None
    assert picker_query("hello") is None


def test_move_selection_clamps_to_rows():
    assert move_selection(0, 1, 3) == 1
    assert move_selection(2, 1, 3) == 2
    assert move_selection(0, -1, 3) == 0
    assert move_selection(8, 1, 20) == 8
    assert move_selection(0, 1, 0) == 0


def test_digit_choice_picks_numbered_row(catalog: SkillCatalog):
    # "/" lists pdf then code-review (catalog order).
    skill = digit_choice("/2", catalog)
    assert skill is not None
    assert skill.id == "review"
    skill = digit_choice("/pd1", catalog)
    assert skill is not None
    assert skill.id == "pdf"


def test_digit_choice_ignores_other_input(catalog: SkillCatalog):
    assert digit_choice("/pd2", catalog) is None
    assert digit_choice("/pdf 1", catalog) is None
    assert digit_choice("hello 1", catalog) is None
    assert digit_choice("/pd0", catalog) is None
    assert digit_choice("/1", SkillCatalog([])) is None


def test_digit_choice_prefers_names_containing_digits(tmp_path: Path):
    catalog = SkillCatalog(
        [
            Skill(id="a", name="mp3-tools", directory=tmp_path),
            Skill(id="b", name="mp4-tools", directory=tmp_path),
        ]
    )
    assert digit_choice("/mp3", catalog) is None
    skill = digit_choice("/mp2", catalog)
    assert skill is not None
    assert skill.id == "b"


def test_picker_navigation_bindings():
    keys = {binding[0]: binding[1] for binding in ChatApp.BINDINGS}
    assert keys["up"] == "picker_move(-1)"
    assert keys["down"] == "picker_move(1)"
    assert keys["escape"] == "cancel_run"


def test_chat_app_initialization(tmp_path: Path, catalog: SkillCatalog):
    session = ConversationSession(tmp_path, catalog=catalog)
    app = ChatApp(session)
    assert app.session is session
    assert app.update_scheduled is False


def test_chat_app_debounces_updates(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    app = ChatApp(ConversationSession(tmp_path))
    timers: list[float] = []
    monkeypatch.setattr(app, "set_timer", lambda delay, _cb: timers.append(delay))

    app._on_session_change()
    app._on_session_change()

    assert timers == [0.05]
    assert app.update_scheduled is True


def test_transcript_printer_emits_new_suffixes(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
):
    session = ConversationSession(tmp_path)
    printer = TranscriptPrinter(session)

    session._on_chunk(
        b'{"type":"stream_event","event":{"type":"content_block_delta",'
        b'"delta":{"type":"text_delta","text":"Hel"}}}\n'
    )
    printer()
    session._on_chunk(
        b'{"type":"stream_event","event":{"type":"content_block_delta",'
        b'"delta":{"type":"text_delta","text":"lo"}}}\n'
    )
    printer()
    printer()

    assert capsys.readouterr().out == "Hello"


def test_transcript_printer_skips_existing(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
):
    session = ConversationSession(tmp_path)
    session._on_chunk(b'{"type":"result","result":"old answer"}\n')
    printer = TranscriptPrinter(session)
    printer.skip_existing()

    session._on_chunk(b'{"type":"result","result":"new answer"}\n')
    printer()

    assert capsys.readouterr().out == "new answer"


def test_transcript_printer_separates_messages(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
):
    session = ConversationSession(tmp_path)
    printer = TranscriptPrinter(session)

    session._on_chunk(
        b'{"type":"assistant","message":{"id":"t1",'
        b'"content":[{"type":"text","text":"Hello"}]}}\n'
    )
    printer()
    session._on_chunk(b'{"type":"result","result":"Done"}\n')
    printer()

    assert capsys.readouterr().out == "Hello\nDone"
