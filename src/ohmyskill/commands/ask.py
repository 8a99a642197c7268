"""ohmyskill ask — one-shot prompt with a streamed transcript."""

from __future__ import annotations

import asyncio
import contextlib
import signal
from pathlib import Path

import click

from ohmyskill.commands.helpers import (
    build_session,
    format_error_preview,
    load_config_or_exit,
)
from ohmyskill.conversation.session import ConversationSession
from ohmyskill.errors import ConversationError


class TranscriptPrinter:
    """Echoes assistant text as the transcript grows.

    Content only ever grows by appending, so remembering how much of each
    message was printed is enough to emit the new suffix.
    """

    def __init__(self, session: ConversationSession) -> None:
        self._session = session
        self._printed: dict[str, int] = {}
        self._last_id: str | None = None

    def skip_existing(self) -> None:
        for message in self._session.transcript:
            self._printed[message.id] = len(message.content)

    def __call__(self) -> None:
        for message in self._session.transcript:
            if message.role != "assistant":
                continue
            done = self._printed.get(message.id, 0)
            if len(message.content) <= done:
                continue
            if self._last_id is not None and self._last_id != message.id:
                click.echo()
            click.echo(message.content[done:], nl=False)
            self._printed[message.id] = len(message.content)
            self._last_id = message.id


@click.command()
@click.argument("prompt")
@click.option("-s", "--skill", "skill_name", help="Scope the prompt to a skill.")
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
def ask(
    prompt: str,
    skill_name: str | None,
    directory: Path | None,
    config_file: str | None,
) -> None:
    """Send PROMPT to the agent and stream the answer."""
    config = load_config_or_exit(config_file)
    session = build_session(config, directory)

    skill_id: str | None = None
    if skill_name:
        skill = session.catalog.find_by_name(skill_name.lstrip("/"))
        if skill is None:
            click.echo(f"Error: Unknown skill: {skill_name}", err=True)
            raise SystemExit(1)
        skill_id = skill.id

    error = asyncio.run(_run_ask(session, prompt, skill_id))
    if error:
        click.echo(f"Error: {format_error_preview(error)}", err=True)
        raise SystemExit(1)


async def _run_ask(
    session: ConversationSession, prompt: str, skill_id: str | None
) -> str | None:
    """Drive one exchange; returns the error text, if any."""
    printer = TranscriptPrinter(session)
    printer.skip_existing()
    session.subscribe(printer)

    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, session.cancel)

    try:
        task = session.send(prompt, skill_id)
    except (ConversationError, ValueError) as exc:
        return str(exc)
    await task
    click.echo()
    return session.last_error
