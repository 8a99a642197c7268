"""Root CLI group and version flag."""

import logging

import click

from ohmyskill import __version__
from ohmyskill.commands.ask import ask
from ohmyskill.commands.chat import chat
from ohmyskill.commands.skills import skills


@click.group()
@click.version_option(version=__version__, prog_name="ohmyskill")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """ohmyskill — chat with the Claude CLI, scoped by skills."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


cli.add_command(ask)
cli.add_command(chat)
cli.add_command(skills)
