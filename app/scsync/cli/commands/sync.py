"""Sync command implementation.

Converges the system to the declared state: system update, up-sync,
down-sync and orphan removal, in that order.
"""

import logging
from typing import Annotated

import typer

from scsync.cli.types import ConfigOption, fail, require_package_manager, require_settings
from scsync.core.engine import reconcile
from scsync.core.errors import ScsyncError
from scsync.core.executor import SyncOrder
from scsync.core.runners import SubprocessCommandRunner, SubprocessQueryRunner
from scsync.utils.formatting import print_info, print_success

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Synchronize installed packages with the configuration.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def sync_packages(
    ctx: typer.Context,
    config: ConfigOption = None,
    dry_run: Annotated[
        bool | None,
        typer.Option(
            "--dry-run/--no-dry-run",
            help="Only print commands (overrides 'dry_mode' from the config).",
        ),
    ] = None,
    order: Annotated[
        SyncOrder,
        typer.Option(
            "--order",
            "-o",
            help="Phases to run: up-down, down-up, up or down.",
            case_sensitive=False,
        ),
    ] = SyncOrder.UP_DOWN,
) -> None:
    """Synchronize installed packages with the configuration.

    Phases, in order:
      - update: refresh databases and upgrade the system
      - up: mark declared dependencies explicit, install missing packages
      - down: demote undeclared packages still required, remove the rest
      - orphans: remove dependencies nothing requires anymore

    The first failing command aborts the run. Nothing is rolled back.

    Examples:
        scsync sync --dry-run           # Preview commands
        scsync sync --no-dry-run        # Apply changes
        scsync sync --order up          # Only install / promote
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = require_settings(config)
    require_package_manager(settings)

    effective_dry_run = settings.global_settings.dry_mode if dry_run is None else dry_run

    try:
        plan = reconcile(
            settings,
            SubprocessCommandRunner(),
            SubprocessQueryRunner(),
            dry_run=effective_dry_run,
            order=order,
        )
    except ScsyncError as e:
        fail("Error synchronizing", e)

    if plan.is_in_sync:
        print_success("Declared packages are already in sync.")

    if effective_dry_run:
        print_info("Dry-run mode: No changes were made.")
