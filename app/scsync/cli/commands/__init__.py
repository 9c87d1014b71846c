"""CLI commands for scsync.

This package contains all subcommand implementations.
"""

from scsync.cli.commands import diff, export, sync

__all__ = ["diff", "export", "sync"]
