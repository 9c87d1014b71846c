"""Shared types and utilities for CLI commands.

This module provides common option types and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from pathlib import Path
from typing import Annotated, NoReturn

import typer

from scsync.core.config import Settings, load_settings
from scsync.core.errors import ConfigError, ConfigNotFoundError, ScsyncError, format_error_chain
from scsync.core.paths import get_config_path
from scsync.utils.formatting import print_error, print_info
from scsync.utils.shell import command_exists

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Config file (default: $SCS_GLOBAL_CONFIG or ~/.config/scsync/config.toml).",
        dir_okay=False,
    ),
]


def fail(context: str, err: ScsyncError) -> NoReturn:
    """Print an error with its full cause chain and exit with status 1.

    Args:
        context: What was being done, e.g. "Error synchronizing".
        err: The error to render.

    Raises:
        typer.Exit: Always.
    """
    print_error(f"{context}: {format_error_chain(err)}")
    raise typer.Exit(code=1) from err


def require_settings(config_path: Path | None = None) -> Settings:
    """Load settings or exit with helpful error message.

    Args:
        config_path: Optional custom config path.

    Returns:
        Loaded and validated Settings.

    Raises:
        typer.Exit: If the settings cannot be loaded.
    """
    path = get_config_path(config_path)
    try:
        return load_settings(path)
    except ConfigNotFoundError as e:
        print_error(f"Config not found: {path}")
        print_info("Run 'scsync export --format toml OUTPUT' to create one from this system.")
        raise typer.Exit(code=1) from e
    except ConfigError as e:
        fail("Error in configuration", e)


def require_package_manager(settings: Settings) -> None:
    """Exit if the package manager queried by the settings is not installed.

    Raises:
        typer.Exit: If the query program cannot be found in PATH.
    """
    query_cmd = settings.command_table().installed_packages_cmd
    if query_cmd and not command_exists(query_cmd[0]):
        print_error(f"'{query_cmd[0]}' is not available on this system.")
        raise typer.Exit(code=1)
