"""Process supervisor — spawns the agent CLI and streams its output."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import shutil
import signal
from collections.abc import Callable, Sequence
from pathlib import Path

from ohmyskill.constants import (
    DEFAULT_EXECUTABLE_CANDIDATES,
    DEFAULT_TERMINATE_TIMEOUT,
    EXECUTABLE_NAME,
    READ_CHUNK_BYTES,
)
from ohmyskill.conversation.models import ProcessOutcome
from ohmyskill.errors import (
    DependencyMissingError,
    NonZeroExitError,
    SessionBusyError,
    SpawnError,
)

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[bytes], None]
ExitCallback = Callable[[int], None]


class ProcessSupervisor:
    """Runs one agent process at a time with merged stdout/stderr.

    The prompt is written to stdin once, then stdin is closed so the agent
    sees end-of-input.  Output chunks are forwarded to the caller strictly
    in read order while the process runs.
    """

    def __init__(
        self,
        candidates: Sequence[str] | None = None,
        *,
        search_path: bool = True,
        terminate_timeout: float = DEFAULT_TERMINATE_TIMEOUT,
        chunk_size: int = READ_CHUNK_BYTES,
    ) -> None:
        self._candidates = (
            list(candidates)
            if candidates is not None
            else list(DEFAULT_EXECUTABLE_CANDIDATES)
        )
        self._search_path = search_path
        self._terminate_timeout = terminate_timeout
        self._chunk_size = chunk_size

        self._process: asyncio.subprocess.Process | None = None
        self._active = False
        self._cancel_requested = False
        self._kill_handle: asyncio.TimerHandle | None = None

    @property
    def running(self) -> bool:
        """True from the start of :meth:`run` until it resolves."""
        return self._active

    @property
    def pid(self) -> int | None:
        """PID of the live agent process, if any."""
        proc = self._process
        if proc is not None and proc.returncode is None:
            return proc.pid
        return None

    # ------------------------------------------------------------------ #
    # Executable resolution
    # ------------------------------------------------------------------ #

    def resolve_executable(self) -> str:
        """Return the first candidate path that exists.

        Raises:
            DependencyMissingError: When no candidate exists.
        """
        for candidate in self._candidates:
            if Path(candidate).is_file():
                logger.debug("found agent executable at %s", candidate)
                return candidate
        if self._search_path:
            found = shutil.which(EXECUTABLE_NAME)
            if found:
                logger.debug("found agent executable on PATH: %s", found)
                return found
        raise DependencyMissingError(self._candidates)

    # ------------------------------------------------------------------ #
    # Running
    # ------------------------------------------------------------------ #

    async def run(
        self,
        arguments: Sequence[str],
        working_directory: Path,
        prompt: str,
        on_chunk: ChunkCallback,
        on_exit: ExitCallback | None = None,
        *,
        executable: str | None = None,
    ) -> ProcessOutcome:
        """Spawn the agent, feed it *prompt* and stream its output.

        ``on_exit`` fires exactly once per spawned process with its exit
        code.

        Raises:
            DependencyMissingError: No executable could be resolved.
            SpawnError: The process could not be started.
            NonZeroExitError: The process exited with a non-zero code.
        """
        if self._active:
            msg = "An agent process is already running"
            raise SessionBusyError(msg)
        self._active = True
        self._cancel_requested = False
        try:
            return await self._run(
                arguments, working_directory, prompt, on_chunk, on_exit, executable
            )
        finally:
            self._cancel_kill_timer()
            self._process = None
            self._active = False

    async def _run(
        self,
        arguments: Sequence[str],
        working_directory: Path,
        prompt: str,
        on_chunk: ChunkCallback,
        on_exit: ExitCallback | None,
        executable: str | None,
    ) -> ProcessOutcome:
        if executable is None:
            executable = self.resolve_executable()

        logger.info("spawning %s in %s", executable, working_directory)
        try:
            proc = await asyncio.create_subprocess_exec(
                executable,
                *arguments,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=str(working_directory),
                start_new_session=True,
            )
        except OSError as exc:
            msg = f"Failed to spawn Claude CLI: {exc}"
            raise SpawnError(msg) from exc
        self._process = proc

        if self._cancel_requested:
            self._terminate(proc)
        else:
            await self._write_prompt(proc, prompt)

        output = bytearray()
        try:
            if proc.stdout is not None:
                while True:
                    chunk = await proc.stdout.read(self._chunk_size)
                    if not chunk:
                        break
                    output.extend(chunk)
                    on_chunk(chunk)
        except BaseException:
            self._kill(proc)
            with contextlib.suppress(Exception):
                await proc.wait()
            raise

        returncode = await proc.wait()
        logger.info("agent process exited with code %s", returncode)
        if on_exit is not None:
            on_exit(returncode)

        text = output.decode(errors="replace")
        if self._cancel_requested:
            return ProcessOutcome(returncode=returncode, output=text, cancelled=True)
        if returncode != 0:
            raise NonZeroExitError(returncode, text)
        return ProcessOutcome(returncode=returncode, output=text)

    async def _write_prompt(self, proc: asyncio.subprocess.Process, prompt: str) -> None:
        stdin = proc.stdin
        if stdin is None:
            return
        try:
            stdin.write(prompt.encode())
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError, OSError) as exc:
            logger.warning("failed to write prompt to agent stdin: %s", exc)
        finally:
            with contextlib.suppress(BrokenPipeError, ConnectionResetError, OSError):
                stdin.close()

    # ------------------------------------------------------------------ #
    # Cancellation
    # ------------------------------------------------------------------ #

    def cancel(self) -> None:
        """Request termination of the in-flight process.

        Safe to call at any time and any number of times.  Sends SIGTERM
        and escalates to SIGKILL after the grace period.  A cancel that
        arrives while the process is still being spawned takes effect as
        soon as it exists.
        """
        if not self._active or self._cancel_requested:
            return
        self._cancel_requested = True
        proc = self._process
        if proc is not None:
            self._terminate(proc)

    def _terminate(self, proc: asyncio.subprocess.Process) -> None:
        logger.info("terminating agent process group %s", proc.pid)
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.terminate()
        # Tool commands the agent started share its stdout.
        _signal_group(proc, signal.SIGTERM)
        with contextlib.suppress(RuntimeError):
            loop = asyncio.get_running_loop()
            self._kill_handle = loop.call_later(
                self._terminate_timeout, self._kill, proc
            )

    def _kill(self, proc: asyncio.subprocess.Process) -> None:
        logger.warning("killing agent process group %s", proc.pid)
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
        _signal_group(proc, signal.SIGKILL)

    def _cancel_kill_timer(self) -> None:
        if self._kill_handle is not None:
            self._kill_handle.cancel()
            self._kill_handle = None


def _signal_group(proc: asyncio.subprocess.Process, sig: signal.Signals) -> None:
    """Signal the process group led by *proc* (spawned with its own session)."""
    if not hasattr(os, "killpg"):
        return
    with contextlib.suppress(ProcessLookupError, PermissionError):
        os.killpg(proc.pid, sig)
