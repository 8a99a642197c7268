"""Conversation session — drives one agent process per send."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable, Sequence
from pathlib import Path

from ohmyskill.constants import ChangeListener
from ohmyskill.conversation.assembler import LineAssembler
from ohmyskill.conversation.decoder import decode
from ohmyskill.conversation.models import Message
from ohmyskill.conversation.supervisor import ProcessSupervisor
from ohmyskill.conversation.transcript import TranscriptAccumulator
from ohmyskill.errors import (
    ConversationError,
    NonZeroExitError,
    SessionBusyError,
    SkillNotFoundError,
)
from ohmyskill.skills.catalog import SkillCatalog

logger = logging.getLogger(__name__)


class ConversationSession:
    """Composes supervisor, assembler, decoder and transcript.

    All transcript mutations run on the event loop that called
    :meth:`send`; output chunks are applied in the order they were read.
    Overlapping sends are rejected with :class:`SessionBusyError`.
    """

    def __init__(
        self,
        working_directory: Path,
        *,
        supervisor: ProcessSupervisor | None = None,
        catalog: SkillCatalog | None = None,
        session_id: str | None = None,
        partial_messages: bool = False,
        extra_args: Sequence[str] = (),
    ) -> None:
        self.session_id = session_id or str(uuid.uuid4())
        self.working_directory = Path(working_directory)
        self._supervisor = supervisor or ProcessSupervisor()
        self._catalog = catalog or SkillCatalog()
        self._partial_messages = partial_messages
        self._extra_args = list(extra_args)

        self._transcript = TranscriptAccumulator()
        self._assembler = LineAssembler()
        self._active_task: asyncio.Task[None] | None = None
        self._is_processing = False
        self._last_error: str | None = None
        self._cancel_requested = False
        # Set once the agent has acknowledged this session id.
        self._resumable = False
        self._listeners: list[ChangeListener] = []

    # ------------------------------------------------------------------ #
    # Observable state
    # ------------------------------------------------------------------ #

    @property
    def transcript(self) -> list[Message]:
        """Live transcript; treat as read-only."""
        return self._transcript.messages

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def catalog(self) -> SkillCatalog:
        return self._catalog

    def snapshot(self) -> list[Message]:
        return self._transcript.snapshot()

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Call *listener* after every state change; returns an unsubscriber."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def clear_error(self) -> None:
        self._last_error = None
        self._notify()

    # ------------------------------------------------------------------ #
    # Sending
    # ------------------------------------------------------------------ #

    def build_arguments(self) -> list[str]:
        """CLI flags for a non-interactive, streaming, verbose run."""
        args = ["-p", "--output-format", "stream-json", "--verbose"]
        if self._partial_messages:
            args.append("--include-partial-messages")
        if self._resumable:
            args.extend(["--resume", self.session_id])
        else:
            args.extend(["--session-id", self.session_id])
        args.extend(self._extra_args)
        return args

    def build_prompt(self, text: str, skill_id: str | None = None) -> str:
        """Prefix *text* with the skill selector when *skill_id* is given.

        Raises:
            SkillNotFoundError: *skill_id* is not in the catalog.
        """
        if skill_id is None:
            return text
        skill = self._catalog.get(skill_id)
        if skill is None:
            msg = f"Unknown skill: {skill_id}"
            raise SkillNotFoundError(msg)
        return f"{skill.selector} {text}"

    def send(self, text: str, skill_id: str | None = None) -> asyncio.Task[None]:
        """Start an exchange and return the task driving it.

        Must be called from a running event loop.  The returned task never
        raises for conversation failures; they land in :attr:`last_error`.

        Raises:
            SessionBusyError: A previous send is still in flight.
            SkillNotFoundError: *skill_id* is unknown.
            ValueError: *text* is empty.
        """
        if self._is_processing:
            msg = "A message is already being processed"
            raise SessionBusyError(msg)
        if not text.strip():
            msg = "Cannot send an empty message"
            raise ValueError(msg)
        prompt = self.build_prompt(text, skill_id)
        loop = asyncio.get_running_loop()

        self._transcript.begin_cycle()
        self._transcript.add_user_message(prompt)
        self._assembler = LineAssembler()
        self._is_processing = True
        self._last_error = None
        self._cancel_requested = False
        self._notify()

        task = loop.create_task(self._run(prompt))
        self._active_task = task
        return task

    async def wait(self) -> None:
        """Wait for the in-flight send, if any, to finish."""
        task = self._active_task
        if task is not None:
            await asyncio.shield(task)

    def cancel(self) -> None:
        """Stop the in-flight send.  Idempotent; never records an error."""
        if self._active_task is None or not self._is_processing:
            return
        self._cancel_requested = True
        self._supervisor.cancel()

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    async def _run(self, prompt: str) -> None:
        try:
            if self._cancel_requested:
                logger.info("send cancelled before spawn")
                return
            outcome = await self._supervisor.run(
                self.build_arguments(),
                self.working_directory,
                prompt,
                self._on_chunk,
            )
            if outcome.cancelled:
                logger.info("agent run cancelled")
        except NonZeroExitError as exc:
            logger.error("agent exited with code %d", exc.returncode)
            self._last_error = exc.output.strip() or str(exc)
        except ConversationError as exc:
            logger.error("agent run failed: %s", exc)
            self._last_error = str(exc)
        finally:
            self._drain_assembler()
            self._transcript.close_open_turn()
            self._is_processing = False
            self._active_task = None
            self._notify()

    def _on_chunk(self, chunk: bytes) -> None:
        changed = False
        for line in self._assembler.feed(chunk):
            changed = self._on_line(line) or changed
        if changed:
            self._notify()

    def _drain_assembler(self) -> None:
        rest = self._assembler.flush()
        if rest is not None:
            self._on_line(rest)

    def _on_line(self, line: bytes) -> bool:
        event = decode(line)
        if event is None:
            return False
        self._resumable = True
        diagnostic = self._transcript.apply(event)
        if diagnostic is not None:
            logger.warning("agent reported an error: %s", diagnostic)
            self._last_error = diagnostic
        return True

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("session listener failed")
