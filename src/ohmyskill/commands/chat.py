"""ohmyskill chat — interactive TUI over a conversation session."""

from __future__ import annotations

from pathlib import Path

import click
from textual import on
from textual.app import App, ComposeResult
from textual.containers import VerticalScroll
from textual.reactive import reactive
from textual.widgets import Header, Input, Label, Static

from ohmyskill.commands.helpers import build_session, load_config_or_exit
from ohmyskill.conversation.models import Message
from ohmyskill.conversation.session import ConversationSession
from ohmyskill.errors import ConversationError
from ohmyskill.skills.catalog import SkillCatalog
from ohmyskill.skills.scanner import Skill

#: Maximum number of rows shown in the skill picker.
_PICKER_ROWS = 9


def split_skill_command(
    line: str, catalog: SkillCatalog
) -> tuple[Skill | None, str]:
    """Split ``/name rest`` into the matching skill and the remaining text.

    Lines that do not start with ``/`` or name an unknown skill come back
    unchanged with no skill.
    """
    if not line.startswith("/"):
        return None, line
    head, _, rest = line[1:].partition(" ")
    skill = catalog.find_by_name(head) if head else None
    if skill is None:
        return None, line
    return skill, rest.strip()


def picker_query(line: str) -> str | None:
    """Return the skill filter for a partially typed ``/name``, else None."""
    if not line.startswith("/") or " " in line:
        return None
    return line[1:]


def move_selection(index: int, delta: int, count: int) -> int:
    """Clamp *index* + *delta* to the visible picker rows."""
    rows = min(count, _PICKER_ROWS)
    if rows <= 0:
        return 0
    return max(0, min(rows - 1, index + delta))


def digit_choice(value: str, catalog: SkillCatalog) -> Skill | None:
    """Return the skill picked by a row number typed right after ``/query``.

    ``/pd2`` picks the second match for ``pd``, unless ``pd2`` itself still
    matches a skill.
    """
    if len(value) < 2 or value[-1] not in "123456789":
        return None
    query = picker_query(value[:-1])
    if query is None or catalog.filter(query + value[-1]):
        return None
    matches = catalog.filter(query)[:_PICKER_ROWS]
    index = int(value[-1]) - 1
    return matches[index] if index < len(matches) else None


# ------------------------------------------------------------------ #
# Textual widgets
# ------------------------------------------------------------------ #


class TranscriptPanel(VerticalScroll):
    """Scrollable list of conversation messages."""

    messages: reactive[list[Message]] = reactive(list, recompose=True)

    def compose(self) -> ComposeResult:
        if not self.messages:
            yield Label("Ask anything, or type / to pick a skill.", classes="empty-state")
            return
        for message in self.messages:
            who = "You" if message.role == "user" else "Claude"
            yield Label(who, classes=f"author {message.role}")
            yield Static(message.content, classes="bubble", markup=False)

    def watch_messages(self) -> None:
        self.call_after_refresh(
            lambda: self.call_after_refresh(self.scroll_end, animate=False)
        )


class SkillPicker(Static):
    """Numbered list of skills matching the typed ``/query``."""

    skills: reactive[list[Skill]] = reactive(list, recompose=True)
    selected: reactive[int] = reactive(0, recompose=True)

    def compose(self) -> ComposeResult:
        for index, skill in enumerate(self.skills[:_PICKER_ROWS]):
            classes = "skill-row"
            if index == self.selected:
                classes += " selected"
            text = f"{index + 1} {skill.display_name} ({skill.selector})"
            yield Label(
                f"{text}  {skill.description}", classes=classes, markup=False
            )

    def watch_skills(self) -> None:
        self.selected = 0

    @property
    def current(self) -> Skill | None:
        if not self.skills:
            return None
        return self.skills[min(self.selected, len(self.skills) - 1)]


class StatusLine(Static):
    """Processing indicator and last error."""

    busy: reactive[bool] = reactive(False)
    error: reactive[str | None] = reactive(None)

    def render(self) -> str:
        if self.busy:
            return "Working... (esc to cancel)"
        if self.error:
            first = self.error.strip().splitlines()[-1] if self.error.strip() else ""
            return f"Error: {first} (esc to dismiss)"
        return "Ready"


# ------------------------------------------------------------------ #
# Main Textual app
# ------------------------------------------------------------------ #


class ChatApp(App[None]):
    """Chat with the agent, optionally scoped to a skill."""

    CSS = """
    #transcript {
        height: 1fr;
        border: solid $primary;
        padding: 0 1;
    }

    #skill-picker {
        height: auto;
        max-height: 10;
        background: $panel;
    }

    #input-bar {
        dock: bottom;
        height: 3;
        border-top: solid $primary;
    }

    #status-line {
        height: 1;
        color: $text-muted;
    }

    .author {
        text-style: bold;
        margin-top: 1;
    }

    .author.user {
        color: $accent;
    }

    .author.assistant {
        color: $success;
    }

    .skill-row.selected {
        background: $accent;
        text-style: bold;
    }

    .empty-state {
        color: $text-muted;
        text-style: italic;
    }
    """

    BINDINGS = [
        ("escape", "cancel_run", "Cancel"),
        ("up", "picker_move(-1)", "Previous skill"),
        ("down", "picker_move(1)", "Next skill"),
    ]

    def __init__(self, session: ConversationSession) -> None:
        super().__init__()
        self.session = session
        self.update_scheduled = False
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        yield TranscriptPanel(id="transcript")
        yield SkillPicker(id="skill-picker")
        yield StatusLine(id="status-line")
        yield Input(placeholder="Message, or /skill message", id="input-bar")

    def on_mount(self) -> None:
        self.title = "ohmyskill"
        self.sub_title = str(self.session.working_directory)
        self._unsubscribe = self.session.subscribe(self._on_session_change)
        self.set_focus(self.query_one("#input-bar", Input))

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
        self.session.cancel()

    def action_cancel_run(self) -> None:
        picker = self.query_one("#skill-picker", SkillPicker)
        if picker.skills:
            picker.skills = []
        elif self.session.is_processing:
            self.session.cancel()
        elif self.session.last_error:
            self.session.clear_error()

    def action_picker_move(self, delta: int) -> None:
        picker = self.query_one("#skill-picker", SkillPicker)
        if picker.skills:
            picker.selected = move_selection(
                picker.selected, delta, len(picker.skills)
            )

    def _on_session_change(self) -> None:
        if not self.update_scheduled:
            self.update_scheduled = True
            self.set_timer(0.05, self._update_ui)

    def _update_ui(self) -> None:
        self.update_scheduled = False
        self.query_one("#transcript", TranscriptPanel).messages = (
            self.session.snapshot()
        )
        status = self.query_one("#status-line", StatusLine)
        status.busy = self.session.is_processing
        status.error = self.session.last_error

    @on(Input.Changed, "#input-bar")
    def on_input_changed(self, event: Input.Changed) -> None:
        choice = digit_choice(event.value, self.session.catalog)
        if choice is not None:
            self._complete_selector(event.input, choice)
            return
        query = picker_query(event.value)
        picker = self.query_one("#skill-picker", SkillPicker)
        picker.skills = [] if query is None else self.session.catalog.filter(query)

    @on(Input.Submitted, "#input-bar")
    def on_input_submitted(self, event: Input.Submitted) -> None:
        line = event.value.strip()
        if not line:
            return

        picker = self.query_one("#skill-picker", SkillPicker)
        query = picker_query(line)
        if query is not None and line not in ("/exit", "/quit"):
            choice = picker.current
            if choice is None:
                matches = self.session.catalog.filter(query)
                choice = matches[0] if matches else None
            if choice is not None:
                self._complete_selector(event.input, choice)
                return

        if line in ("/exit", "/quit"):
            self.exit()
            return

        skill, text = split_skill_command(line, self.session.catalog)
        if skill is not None and not text:
            self.notify(f"Type a message for {skill.selector}", severity="warning")
            return

        try:
            self.session.send(text, skill.id if skill is not None else None)
        except (ConversationError, ValueError) as exc:
            self.notify(str(exc), severity="warning")
            return
        event.input.clear()
        picker.skills = []

    def _complete_selector(self, field: Input, skill: Skill) -> None:
        # The message body comes next.
        field.value = f"{skill.selector} "
        field.cursor_position = len(field.value)
        self.query_one("#skill-picker", SkillPicker).skills = []


# ------------------------------------------------------------------ #
# Click command
# ------------------------------------------------------------------ #


@click.command()
@click.option(
    "-d",
    "--dir",
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Working directory for the agent.",
)
@click.option(
    "-f", "--file", "config_file", type=click.Path(), help="Config file path."
)
def chat(directory: Path | None, config_file: str | None) -> None:
    """Open the interactive chat TUI."""
    config = load_config_or_exit(config_file)
    session = build_session(config, directory)
    ChatApp(session).run()
