"""ohmyskill skills — list discovered skills."""

from __future__ import annotations

from pathlib import Path

import click

from ohmyskill.commands.helpers import build_catalog, load_config_or_exit


@click.command()
@click.option(
    "--dir",
    "skills_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Skills directory (defaults to ~/.claude/skills).",
)
@click.option(
    "-f", "--file", "config_file", type=click.Path(), help="Config file path."
)
def skills(skills_dir: Path | None, config_file: str | None) -> None:
    """List the skills available to prompts."""
    config = load_config_or_exit(config_file)
    catalog = build_catalog(config, skills_dir)
    if not len(catalog):
        click.echo("No skills found.")
        return
    width = max(len(skill.selector) for skill in catalog)
    for skill in catalog:
        click.echo(f"  {skill.selector.ljust(width)}  {skill.description}")
