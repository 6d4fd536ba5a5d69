"""Install command implementation.

Converges the selected groups to PRESENT: installs every missing item
and creates the group's workspace scaffolding.
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
from workctl.core.log import configure_logging
from workctl.core.manifest import require_manifest
from workctl.core.state import StateStore
from workctl.models.action import BatchResult, Direction
from workctl.utils.formatting import console, print_info, print_step, print_warning

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Install package groups.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def install_groups(
    ctx: typer.Context,
    groups: Annotated[
        list[str] | None,
        typer.Option(
            "--group",
            "-g",
            help="Group to install (repeatable).",
        ),
    ] = None,
    all_groups: Annotated[
        bool,
        typer.Option(
            "--all",
            "-a",
            help="Install every group in the manifest.",
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
    no_refresh: Annotated[
        bool,
        typer.Option(
            "--no-refresh",
            help="Skip the package index refresh.",
        ),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt and proceed.",
        ),
    ] = False,
) -> None:
    """Install package groups.

    Every item is checked first and only installed when missing, so
    running the same command twice changes nothing the second time.
    A failing item is reported and the run continues.

    Examples:
        workctl install --group productivity --group finance
        workctl install --all --dry-run
        workctl install --all --yes
    """
    if ctx.invoked_subcommand is not None:
        return

    verbose = bool((ctx.obj or {}).get("verbose", False))
    log_path = configure_logging("install", verbose=verbose)

    config = require_config()
    manifest = require_manifest()
    selected = select_groups(manifest, groups, all_groups)
    require_host()

    item_count = sum(len(g.items) for g in selected)
    print_info(f"Selected {len(selected)} group(s) with {item_count} package(s).")

    if dry_run:
        print_info("Dry-run mode: no changes will be made.")
    elif not yes and not typer.confirm(
        f"\nInstall {len(selected)} group(s)?",
        default=False,
    ):
        print_info("Aborted.")
        raise typer.Exit(code=0)

    with run_lock(config, dry_run), StateStore() as store, interruptible(store):
        engine = build_engine(config, store, dry_run=dry_run, on_result=print_item_result)

        for warning in engine.prepare(selected, refresh=not no_refresh):
            print_warning(warning)

        results = []
        for group in selected:
            print_step(group.title)
            result = engine.converge(group, Direction.PRESENT)
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
        logger.warning("Install finished with %d failure(s)", batch.failed_count)
        raise exit_with(ExitCode.PARTIAL)
