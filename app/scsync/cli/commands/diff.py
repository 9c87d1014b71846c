"""Diff command implementation.

Shows what a sync would change, without running any mutating command.
"""

import json
from typing import Annotated

import typer
from rich.table import Table

from scsync.cli.types import ConfigOption, fail, require_package_manager, require_settings
from scsync.core.engine import ReconcilePlan, plan_reconciliation
from scsync.core.errors import ScsyncError
from scsync.core.runners import SubprocessQueryRunner
from scsync.utils.formatting import console, print_success

app = typer.Typer(
    help="Compare the configuration with the installed packages.",
    invoke_without_command=True,
)

# (diff field, status icon, style, note)
_ROWS: tuple[tuple[str, str, str, str], ...] = (
    ("to_install", "[+]", "added", "Install"),
    ("to_mark_explicit", "[^]", "changed", "Mark as explicit"),
    ("to_mark_dependency", "[v]", "warning", "Mark as dependency"),
    ("to_remove", "[-]", "removed", "Remove"),
)


def create_plan_table(plan: ReconcilePlan) -> Table:
    """Create a Rich table listing every change of a plan.

    Args:
        plan: The computed plan.

    Returns:
        Rich Table with one row per affected package.
    """
    table = Table(
        title="Package Differences",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=6, justify="center")
    table.add_column("Package", no_wrap=True)
    table.add_column("Action")

    fields = {**plan.up.to_dict(), **plan.down.to_dict()}
    for key, icon, style, note in _ROWS:
        for name in fields[key]:
            table.add_row(
                f"[{style}]{icon}[/{style}]",
                f"[{style}]{name}[/{style}]",
                f"[muted]{note}[/muted]",
            )

    return table


def _print_summary(plan: ReconcilePlan) -> None:
    """Print a one-line count of the planned changes."""
    parts: list[str] = []
    if plan.up.to_install:
        parts.append(f"[added]{len(plan.up.to_install)} to install[/added]")
    if plan.up.to_mark_explicit:
        parts.append(f"[changed]{len(plan.up.to_mark_explicit)} to mark explicit[/changed]")
    if plan.down.to_mark_dependency:
        count = len(plan.down.to_mark_dependency)
        parts.append(f"[warning]{count} to mark as dependency[/warning]")
    if plan.down.to_remove:
        parts.append(f"[removed]{len(plan.down.to_remove)} to remove[/removed]")
    console.print(f"\nSummary: {', '.join(parts)}")


@app.callback(invoke_without_command=True)
def show_diff(
    ctx: typer.Context,
    config: ConfigOption = None,
    output_json: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output the plan as JSON.",
        ),
    ] = False,
) -> None:
    """Compare the configuration with the installed packages.

    Only queries the package manager; nothing is changed.

    Examples:
        scsync diff
        scsync diff --json
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = require_settings(config)
    require_package_manager(settings)

    try:
        plan = plan_reconciliation(settings, SubprocessQueryRunner())
    except ScsyncError as e:
        fail("Error computing diff", e)

    if output_json:
        typer.echo(json.dumps(plan.to_dict(), indent=2))
        return

    if plan.is_in_sync:
        print_success("Declared packages are already in sync.")
        return

    console.print(create_plan_table(plan))
    _print_summary(plan)
