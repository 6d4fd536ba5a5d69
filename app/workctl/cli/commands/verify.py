"""Verify command implementation.

Audits the live system against the manifest: a full check of every
item and artifact, a quick check of the essential applications, or a
check of a single group or item.
"""

import json
import logging
from typing import Annotated

import typer

from workctl.backends import get_backends
from workctl.cli.display import create_quick_table, create_report_table, print_report_summary
from workctl.cli.runtime import ExitCode, exit_with, require_config
from workctl.core.log import configure_logging
from workctl.core.manifest import require_manifest
from workctl.core.verifier import Verifier
from workctl.models.manifest import Manifest
from workctl.models.report import VerificationReport
from workctl.utils.formatting import console, print_info, print_success, print_warning

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Verify installed groups.",
    invoke_without_command=True,
)


def _targeted_report(verifier: Verifier, manifest: Manifest, name: str) -> VerificationReport:
    """Verify a group by name, or else a single item by identifier.

    Raises:
        typer.BadParameter: If the name matches neither.
    """
    if name in manifest.group_names:
        return verifier.verify(manifest, [manifest.get_group(name)])

    found = manifest.find_item(name)
    if found is None:
        raise typer.BadParameter(f"'{name}' is neither a group nor an item in the manifest.")
    group, item = found
    return verifier.verify_item(group, item)


@app.callback(invoke_without_command=True)
def verify_installation(
    ctx: typer.Context,
    quick: Annotated[
        bool,
        typer.Option(
            "--quick",
            "-q",
            help="Only check the essential applications.",
        ),
    ] = False,
    full: Annotated[
        bool,
        typer.Option(
            "--full",
            "-f",
            help="Check every group (default).",
        ),
    ] = False,
    check: Annotated[
        str | None,
        typer.Option(
            "--check",
            "-c",
            help="Check a single group or item.",
        ),
    ] = None,
    output_json: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Verify installed groups.

    Queries the package backends and the filesystem directly. Exits
    with code 3 when a check failed.

    Examples:
        workctl verify
        workctl verify --quick
        workctl verify --check finance
        workctl verify --check gnucash --json
    """
    if ctx.invoked_subcommand is not None:
        return

    if sum((quick, full, check is not None)) > 1:
        raise typer.BadParameter("Use only one of --full, --quick or --check.")

    verbose = bool((ctx.obj or {}).get("verbose", False))
    configure_logging("verify", verbose=verbose)

    config = require_config()
    manifest = require_manifest()
    verifier = Verifier(
        get_backends(timeout=float(config.command_timeout_seconds)),
        config.thresholds.to_thresholds(),
    )

    if quick:
        quick_report = verifier.quick_verify(manifest)
        if output_json:
            console.print_json(json.dumps(quick_report.to_dict()))
        else:
            console.print(create_quick_table(quick_report))
            console.print(f"\nEssential applications: {quick_report.passed}/{quick_report.total}")
        if quick_report.passed < quick_report.total:
            raise exit_with(ExitCode.PARTIAL)
        return

    if check is not None:
        report = _targeted_report(verifier, manifest, check)
    else:
        report = verifier.verify(manifest)

    if output_json:
        console.print_json(json.dumps(report.to_dict()))
    else:
        console.print(create_report_table(report))
        print_report_summary(report)

    if report.total == 0:
        if not output_json:
            print_info("Nothing to verify.")
        return

    if report.failed:
        raise exit_with(ExitCode.PARTIAL)
    if report.warned and config.warnings_fail_verify:
        if not output_json:
            print_warning("Warnings are configured to fail verification.")
        raise exit_with(ExitCode.PARTIAL)
    if not output_json:
        print_success("All required checks passed.")
