"""typedstore CLI."""

from typedstore.cli.main import cli, main

__all__ = ["cli", "main"]
