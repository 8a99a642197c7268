"""Shared constants and type aliases for the ohmyskill runtime."""

from __future__ import annotations

from collections.abc import Callable

#: Ordered executable locations probed before falling back to ``PATH``.
DEFAULT_EXECUTABLE_CANDIDATES: tuple[str, ...] = (
    "/opt/homebrew/bin/claude",
    "/usr/local/bin/claude",
    "/opt/homebrew/bin/claude-cli",
)

#: Name looked up on ``PATH`` when no candidate path exists.
EXECUTABLE_NAME = "claude"

#: Tool name the agent uses to ask the user a clarifying question.
ASK_USER_CAPABILITY = "AskUserQuestion"

#: Default directory scanned for skill definitions (relative to home).
DEFAULT_SKILLS_SUBDIR = ".claude/skills"

#: Description used when a skill's front matter omits one.
DEFAULT_SKILL_DESCRIPTION = "No description"

#: Bytes requested per read from the agent's output pipe.
READ_CHUNK_BYTES = 65_536

#: Seconds to wait after SIGTERM before SIGKILL.
DEFAULT_TERMINATE_TIMEOUT = 3.0

#: Callback type for session change listeners.
ChangeListener = Callable[[], None]
