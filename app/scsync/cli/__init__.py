"""CLI package for scsync.

This package contains the Typer application and all subcommands.
"""

from scsync.cli.main import app

__all__ = ["app"]
