"""typedstore CLI: main entry point and shared console."""

from __future__ import annotations

import click
from rich.console import Console

console = Console()


@click.group()
def main():
    """typedstore: typed, cached accessors over JSON documents."""
    pass


def cli():
    """Entrypoint that loads .env before running the CLI."""
    from dotenv import load_dotenv

    load_dotenv()
    main()


# Import subcommand modules to register commands
from typedstore.cli.show_commands import config, show  # noqa: E402, F401

# Register commands
main.add_command(show)
main.add_command(config)
