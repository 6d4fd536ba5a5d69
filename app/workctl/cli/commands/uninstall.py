"""Uninstall command implementation.

Converges groups to ABSENT. Each group's user paths are archived before
anything is removed; ``--all`` adds a whole-profile archive, a typed
confirmation and a final cleanup pass.
"""

import logging
from typing import Annotated

import typer

from workctl.cli.display import (
    create_batch_table,
    print_artifact_results,
    print_batch_summary,
    print_group_summary,
    print_item_result,
)
from workctl.cli.runtime import (
    ExitCode,
    build_engine,
    exit_with,
    interruptible,
    require_config,
    require_host,
    run_lock,
    select_groups,
)
from workctl.core.config import WorkctlConfig
from workctl.core.confirm import (
    AssumeYesConfirmation,
    ConfirmationProvider,
    TyperConfirmation,
)
from workctl.core.errors import BackupError, UserAbortedError
from workctl.core.log import configure_logging
from workctl.core.manifest import require_manifest
from workctl.core.state import StateStore
from workctl.models.action import BatchResult, Direction
from workctl.models.manifest import Group, Manifest
from workctl.utils.formatting import console, print_error, print_info, print_step

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Remove package groups.",
    invoke_without_command=True,
)


def _ask_user_data(groups: list[Group], confirm: ConfirmationProvider) -> set[str]:
    """Ask, before anything is removed, which groups may lose user data.

    Returns:
        Names of the groups whose workspace directories and templates
        may be deleted.
    """
    approved: set[str] = set()
    for group in groups:
        if not group.has_user_data:
            continue
        if confirm.confirm(f"Also delete workspace directories and templates of '{group.name}'?"):
            approved.add(group.name)
        else:
            print_info(f"User data of '{group.name}' will be kept.")
    return approved


@app.callback(invoke_without_command=True)
def uninstall_groups(
    ctx: typer.Context,
    groups: Annotated[
        list[str] | None,
        typer.Option(
            "--group",
            "-g",
            help="Group to remove (repeatable).",
        ),
    ] = None,
    all_groups: Annotated[
        bool,
        typer.Option(
            "--all",
            "-a",
            help="Remove every group, back up the profile and clean up.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would be done without making changes.",
        ),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Answer yes to yes/no questions. --all still asks for the typed phrase.",
        ),
    ] = False,
    keep_data: Annotated[
        bool,
        typer.Option(
            "--keep-data",
            help="Never delete workspace directories or templates.",
        ),
    ] = False,
) -> None:
    """Remove package groups.

    Backs up each group's configuration before removing it. Packages
    marked as retained (git, python3, ...) are never removed.

    Examples:
        workctl uninstall --group creative
        workctl uninstall --group workspace --keep-data
        workctl uninstall --all --dry-run
    """
    if ctx.invoked_subcommand is not None:
        return

    verbose = bool((ctx.obj or {}).get("verbose", False))
    log_path = configure_logging("uninstall", verbose=verbose)

    config = require_config()
    manifest = require_manifest()
    selected = select_groups(manifest, groups, all_groups)
    require_host()

    confirm: ConfirmationProvider = AssumeYesConfirmation() if yes else TyperConfirmation()
    if dry_run:
        print_info("Dry-run mode: no changes will be made.")

    if all_groups:
        batch = _remove_everything(config, manifest, confirm, dry_run, keep_data)
    else:
        if not confirm.confirm(f"Remove {len(selected)} group(s)?"):
            logger.info("Uninstall cancelled by user")
            print_info("Aborted.")
            raise typer.Exit(code=0)
        approved = set() if keep_data else _ask_user_data(selected, confirm)

        with run_lock(config, dry_run), StateStore() as store, interruptible(store):
            engine = build_engine(config, store, dry_run=dry_run, on_result=print_item_result)
            results = []
            for group in selected:
                print_step(group.title)
                result = engine.converge(
                    group,
                    Direction.ABSENT,
                    remove_user_data=group.name in approved,
                )
                print_artifact_results(result.artifacts)
                print_group_summary(result)
                results.append(result)
        batch = BatchResult(groups=tuple(results))

    console.print()
    console.print(create_batch_table(batch, dry_run=dry_run))
    print_batch_summary(batch)
    if log_path is not None:
        console.print(f"[muted]Log: {log_path}[/muted]")

    if batch.has_failures:
        logger.warning("Uninstall finished with %d failure(s)", batch.failed_count)
        raise exit_with(ExitCode.PARTIAL)


def _remove_everything(
    config: WorkctlConfig,
    manifest: Manifest,
    confirm: ConfirmationProvider,
    dry_run: bool,
    keep_data: bool,
) -> BatchResult:
    """Run the complete removal flow of ``uninstall --all``."""
    with run_lock(config, dry_run), StateStore() as store, interruptible(store):
        engine = build_engine(config, store, dry_run=dry_run, on_result=print_item_result)
        try:
            return engine.remove_everything(manifest, confirm, remove_user_data=not keep_data)
        except UserAbortedError as e:
            logger.info("%s", e)
            print_info("Aborted. Nothing was changed.")
            raise typer.Exit(code=0) from e
        except BackupError as e:
            print_error(f"Backup failed, nothing was removed: {e}")
            raise exit_with(ExitCode.ERROR) from e
