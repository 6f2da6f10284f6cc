"""Matchup CLI entry point."""

import click


@click.group()
def cli():
    """Matchup auth, user and match services."""
    pass


# Register subcommands
from matchup.cli.serve_cmd import serve  # noqa: E402

cli.add_command(serve)
