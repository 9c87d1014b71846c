"""Utility modules for scsync.

This module exports commonly used utility functions.
"""

from scsync.utils.formatting import (
    console,
    err_console,
    print_command,
    print_error,
    print_info,
    print_report,
    print_success,
    print_warning,
)
from scsync.utils.shell import CommandResult, command_exists, run_interactive, run_query

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "print_command",
    "print_error",
    "print_info",
    "print_report",
    "print_success",
    "print_warning",
    "run_interactive",
    "run_query",
]
