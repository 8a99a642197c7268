"""Shared wiring for CLI commands."""

from __future__ import annotations

from pathlib import Path

import click

from ohmyskill.config.models import AppConfig
from ohmyskill.config.parser import ConfigError, load_config
from ohmyskill.conversation.session import ConversationSession
from ohmyskill.conversation.supervisor import ProcessSupervisor
from ohmyskill.skills.catalog import SkillCatalog
from ohmyskill.skills.scanner import scan_skills


def load_config_or_exit(config_file: str | None) -> AppConfig:
    """Load configuration, printing the error and exiting 1 on failure."""
    try:
        return load_config(Path(config_file) if config_file else None)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc


def build_catalog(config: AppConfig, skills_dir: Path | None = None) -> SkillCatalog:
    return SkillCatalog(scan_skills(skills_dir or config.skills_dir))


def build_session(
    config: AppConfig,
    directory: Path | None = None,
    catalog: SkillCatalog | None = None,
) -> ConversationSession:
    """Create a session wired from *config*.

    *directory* overrides the configured working directory.
    """
    working_directory = directory or config.working_directory or Path.cwd()
    supervisor = ProcessSupervisor(
        config.executable_candidates,
        search_path=config.search_path,
        terminate_timeout=config.terminate_timeout,
    )
    return ConversationSession(
        working_directory,
        supervisor=supervisor,
        catalog=catalog if catalog is not None else build_catalog(config),
        partial_messages=config.partial_messages,
        extra_args=config.extra_args,
    )


def format_error_preview(error_text: str, max_lines: int = 5) -> str:
    """Extract and format the last N non-empty lines of an error payload."""
    lines = [line for line in error_text.split("\n") if line.strip()]
    last = lines[-max_lines:] if len(lines) > max_lines else lines
    return "\n  ".join(last)
