"""ohmyskill — chat with the Claude CLI, scoped by skills."""

__version__ = "0.1.0"
