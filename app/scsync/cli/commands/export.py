"""Export command implementation.

Writes the currently explicitly installed packages as a starting point
for a configuration.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated

import tomli_w
import typer

from scsync.cli.types import ConfigOption, fail
from scsync.core.config import (
    Settings,
    build_config_document,
    load_settings,
    save_config_document,
)
from scsync.core.errors import ConfigError, ConfigNotFoundError, ScsyncError
from scsync.core.package_file import write_package_file
from scsync.core.runners import SubprocessQueryRunner
from scsync.utils.formatting import print_success

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Export explicitly installed packages.",
    invoke_without_command=True,
)


class ExportFormat(str, Enum):
    """Output formats for export."""

    LINES = "lines"
    TOML = "toml"


def _load_or_default_settings(config: Path | None) -> Settings:
    """Load settings, falling back to pacman defaults if there is no config yet."""
    try:
        return load_settings(config)
    except ConfigNotFoundError:
        logger.info("No config found, using pacman defaults")
        return Settings()
    except ConfigError as e:
        fail("Error in configuration", e)


@app.callback(invoke_without_command=True)
def export_packages(
    ctx: typer.Context,
    output: Annotated[
        Path | None,
        typer.Argument(help="File to write. Prints to stdout if omitted.", dir_okay=False),
    ] = None,
    config: ConfigOption = None,
    fmt: Annotated[
        ExportFormat,
        typer.Option(
            "--format",
            "-f",
            help="lines: one package per line; toml: a config declaring them.",
            case_sensitive=False,
        ),
    ] = ExportFormat.LINES,
) -> None:
    """Export explicitly installed packages.

    Examples:
        scsync export packages.txt
        scsync export --format toml ~/.config/scsync/config.toml
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = _load_or_default_settings(config)
    query_cmd = list(settings.command_table().explicitly_installed_cmd)

    try:
        packages = SubprocessQueryRunner().query(query_cmd).to_list()
        if fmt == ExportFormat.TOML:
            document = build_config_document(packages)
            if output is None:
                typer.echo(tomli_w.dumps(document), nl=False)
                return
            saved = save_config_document(document, output)
        else:
            if output is None:
                typer.echo("".join(f"{name}\n" for name in packages), nl=False)
                return
            saved = write_package_file(output, packages)
    except ScsyncError as e:
        fail("Error exporting packages", e)

    print_success(f"Exported {len(packages)} package(s) to {saved}")
