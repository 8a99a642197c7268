"""Exception hierarchy for conversation failures."""

from __future__ import annotations


class ConversationError(Exception):
    """Base class for failures surfaced to the session caller."""


class DependencyMissingError(ConversationError):
    """No agent executable exists at any candidate location."""

    def __init__(self, candidates: list[str]) -> None:
        self.candidates = candidates
        listed = ", ".join(candidates) if candidates else "(none)"
        super().__init__(
            f"Claude CLI not found. Looked in: {listed}. "
            "Install: npm install -g @anthropic-ai/claude-code"
        )


class SpawnError(ConversationError):
    """The OS refused to start the agent process."""


class NonZeroExitError(ConversationError):
    """The agent process exited with a failure code.

    ``output`` holds everything captured from the process so far; it often
    contains the agent's own explanation.
    """

    def __init__(self, returncode: int, output: str) -> None:
        self.returncode = returncode
        self.output = output
        detail = output.strip()
        msg = f"Claude CLI exited with code {returncode}"
        super().__init__(f"{msg}: {detail}" if detail else msg)


class SessionBusyError(ConversationError):
    """A send was issued while another one is still in flight."""


class SkillNotFoundError(ConversationError):
    """The requested skill id is not in the catalog."""
