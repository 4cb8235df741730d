"""Command line interface for tracegen."""

from tracegen.cli.commands import cli, main

__all__ = ["cli", "main"]
