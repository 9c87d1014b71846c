"""Reconciliation entry points.

Wires the components together for one run: the declared state is resolved
once, the system snapshot is captured once, both diffs are computed from
that single pair and the executor applies them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from scsync.core.config import Settings
from scsync.core.declared import ConfigStateResolver, load_declared_config
from scsync.core.diff import DownDiff, UpDiff, compute_down_diff, compute_up_diff
from scsync.core.executor import ExecutionOptions, SyncExecutor, SyncOrder
from scsync.core.groups import GroupResolver
from scsync.core.package_set import PackageSet
from scsync.core.runners import CommandRunner, QueryRunner
from scsync.core.snapshot import SystemSnapshot, capture_snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconcilePlan:
    """Everything computed before the first command runs.

    Attributes:
        declared: The resolved declared state.
        snapshot: The system snapshot the diffs are based on.
        up: Packages to install or mark explicit.
        down: Packages to remove or mark as dependencies.
    """

    declared: PackageSet
    snapshot: SystemSnapshot
    up: UpDiff
    down: DownDiff

    @property
    def is_in_sync(self) -> bool:
        """Check if the system already matches the declared state."""
        return self.up.is_empty and self.down.is_empty

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "in_sync": self.is_in_sync,
            "declared": self.declared.to_list(),
            "up": self.up.to_dict(),
            "down": self.down.to_dict(),
        }


def resolve_declared_state(settings: Settings, query_runner: QueryRunner) -> PackageSet:
    """Resolve the declared state described by the settings.

    Raises:
        BlacklistConflictError: If literal packages are blacklisted.
        GroupQueryError: If a group cannot be expanded.
        ConfigError: If the package file cannot be read.
        TemplateRenderError: If a group() macro is malformed.
    """
    commands = settings.command_table()
    resolver = ConfigStateResolver(
        GroupResolver(query_runner, commands.get_group_packages_cmd),
        warn_on_duplicates=settings.global_settings.warn_on_duplicates,
    )
    return resolver.resolve(load_declared_config(settings))


def plan_reconciliation(settings: Settings, query_runner: QueryRunner) -> ReconcilePlan:
    """Resolve the declared state, capture a snapshot and compute both diffs.

    Only queries are issued; nothing is changed on the system.

    Raises:
        ScsyncError: If resolving or querying fails.
    """
    declared = resolve_declared_state(settings, query_runner)
    logger.debug("Declared state holds %d package(s)", len(declared))

    snapshot = capture_snapshot(query_runner, settings.command_table())

    return ReconcilePlan(
        declared=declared,
        snapshot=snapshot,
        up=compute_up_diff(declared, snapshot),
        down=compute_down_diff(declared, snapshot),
    )


def reconcile(
    settings: Settings,
    command_runner: CommandRunner,
    query_runner: QueryRunner,
    dry_run: bool | None = None,
    order: SyncOrder = SyncOrder.UP_DOWN,
) -> ReconcilePlan:
    """Converge the system to the declared state.

    Args:
        settings: Loaded configuration.
        command_runner: Runner for mutating commands.
        query_runner: Runner for package queries.
        dry_run: Overrides the configured ``dry_mode`` when not None.
        order: Order of the up and down phases.

    Returns:
        The plan that was applied.

    Raises:
        ScsyncError: On the first failure; earlier phases stay applied.
    """
    plan = plan_reconciliation(settings, query_runner)

    executor = SyncExecutor(
        settings.command_table(),
        command_runner,
        query_runner,
        options=ExecutionOptions.from_settings(settings.global_settings, dry_run),
        messages=settings.report_messages(),
    )
    executor.run(plan.up, plan.down, order)
    return plan
