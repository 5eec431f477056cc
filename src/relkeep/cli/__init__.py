"""relkeep command-line interface (typer)."""

from relkeep.cli.app import app

__all__ = ["app"]
