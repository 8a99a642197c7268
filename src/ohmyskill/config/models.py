"""Pydantic v2 models for ohmyskill.yaml configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ohmyskill.constants import (
    DEFAULT_EXECUTABLE_CANDIDATES,
    DEFAULT_TERMINATE_TIMEOUT,
)


class AppConfig(BaseModel):
    """Top-level configuration."""

    model_config = ConfigDict(extra="forbid")

    executable_candidates: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXECUTABLE_CANDIDATES),
        description="Ordered paths probed for the claude executable",
    )
    search_path: bool = Field(
        default=True,
        description="Fall back to looking up 'claude' on PATH",
    )
    skills_dir: Path | None = Field(
        default=None,
        description="Skill definitions root (defaults to ~/.claude/skills)",
    )
    working_directory: Path | None = Field(
        default=None,
        description="Directory the agent runs in (defaults to the current one)",
    )
    partial_messages: bool = Field(
        default=False,
        description="Request incremental text deltas from the agent",
    )
    extra_args: list[str] = Field(
        default_factory=list,
        description="Additional CLI flags appended to every run",
    )
    terminate_timeout: float = Field(
        default=DEFAULT_TERMINATE_TIMEOUT,
        gt=0,
        description="Seconds between SIGTERM and SIGKILL on cancel",
    )

    @field_validator("executable_candidates")
    @classmethod
    def _expand_candidates(cls, v: list[str]) -> list[str]:
        return [str(Path(p).expanduser()) for p in v]

    @field_validator("skills_dir", "working_directory")
    @classmethod
    def _expand_dir(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else None
