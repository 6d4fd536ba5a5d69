"""Shared Rich display functions for runs and reports.

Provides the running per-item output of install and uninstall, the
batch summary table, and the verification report tables.
"""

from rich.markup import escape
from rich.table import Table

from workctl.models.action import (
    ArtifactResult,
    BatchResult,
    Direction,
    GroupResult,
    OperationResult,
    Outcome,
)
from workctl.models.history import BackupRecord
from workctl.models.report import CheckStatus, Health, QuickReport, VerificationReport
from workctl.utils.formatting import console, format_size, print_success

_OUTCOME_MARKS: dict[Outcome, str] = {
    Outcome.APPLIED: "[applied]✓[/applied]",
    Outcome.ALREADY_SATISFIED: "[satisfied]✓[/satisfied]",
    Outcome.SKIPPED: "[skipped]-[/skipped]",
    Outcome.FAILED: "[error]✗[/error]",
}

_OUTCOME_LABELS: dict[Outcome, str] = {
    Outcome.APPLIED: "[applied]applied[/applied]",
    Outcome.ALREADY_SATISFIED: "[satisfied]ok[/satisfied]",
    Outcome.SKIPPED: "[skipped]skipped[/skipped]",
    Outcome.FAILED: "[error]failed[/error]",
}

_STATUS_LABELS: dict[CheckStatus, str] = {
    CheckStatus.PASSED: "[success]PASS[/success]",
    CheckStatus.WARNED: "[warning]WARN[/warning]",
    CheckStatus.FAILED: "[error]FAIL[/error]",
}

_HEALTH_STYLES: dict[Health, str] = {
    Health.FULLY_SUCCESSFUL: "success",
    Health.SUCCESSFUL_WITH_WARNINGS: "success",
    Health.MOSTLY_SUCCESSFUL: "warning",
    Health.HAS_ISSUES: "error",
}


def outcome_label(outcome: Outcome) -> str:
    """Styled short label for an outcome."""
    return _OUTCOME_LABELS[outcome]


def print_item_result(result: OperationResult) -> None:
    """Print one line for an item as soon as it has been converged.

    Used as the engine's ``on_result`` callback.
    """
    mark = _OUTCOME_MARKS[result.outcome]
    name = escape(result.item.display_name)
    detail = result.detail
    if result.outcome is Outcome.ALREADY_SATISFIED:
        detail = "already installed" if result.direction is Direction.PRESENT else "not installed"
    console.print(f"  {mark} {name} [muted]{escape(detail)}[/muted]")


def print_artifact_results(artifacts: tuple[ArtifactResult, ...]) -> None:
    """Print one line per scaffolding artifact."""
    for artifact in artifacts:
        mark = _OUTCOME_MARKS[artifact.outcome]
        name = escape(artifact.artifact.display_name)
        console.print(f"  {mark} {name} [muted]{escape(artifact.detail)}[/muted]")


def print_group_summary(result: GroupResult) -> None:
    """Print the one-line tally after a group has been converged."""
    line = f"  {result.success_count}/{result.total_count} items ok"
    if result.failed_count:
        line += f", [error]{result.failed_count} failed[/error]"
    if result.skipped_count:
        line += f", [skipped]{result.skipped_count} skipped[/skipped]"
    if result.artifact_failed_count:
        line += f", [error]{result.artifact_failed_count} artifact(s) failed[/error]"
    if result.backup is not None:
        line += f" [muted](backup: {escape(str(result.backup.archive_path))})[/muted]"
    console.print(line)


def create_batch_table(batch: BatchResult, dry_run: bool = False) -> Table:
    """Create a Rich table with one row per converged group.

    Args:
        batch: Aggregated run result.
        dry_run: Whether this was a dry run (changes table title).

    Returns:
        Rich Table with outcome counts per group.
    """
    table = Table(
        title="Summary (Dry Run)" if dry_run else "Summary",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Group", no_wrap=True)
    table.add_column("Applied", justify="right")
    table.add_column("Already", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Artifacts", justify="right")

    for group in batch.groups:
        failed = group.failed_count
        artifacts_ok = len(group.artifacts) - group.artifact_failed_count
        table.add_row(
            group.group_name,
            f"[applied]{group.count(Outcome.APPLIED)}[/applied]",
            f"[satisfied]{group.count(Outcome.ALREADY_SATISFIED)}[/satisfied]",
            f"[skipped]{group.skipped_count}[/skipped]",
            f"[error]{failed}[/error]" if failed else "0",
            f"{artifacts_ok}/{len(group.artifacts)}",
        )

    return table


def print_failures(batch: BatchResult) -> None:
    """List every failed item and artifact with its error."""
    for group in batch.groups:
        for result in group.results:
            if result.failed:
                console.print(
                    f"  [error]✗[/error] {group.group_name}/{escape(result.item.identifier)}: "
                    f"[muted]{escape(result.detail)}[/muted]"
                )
        for artifact in group.artifacts:
            if artifact.outcome is Outcome.FAILED:
                console.print(
                    f"  [error]✗[/error] {group.group_name}/"
                    f"{escape(artifact.artifact.display_name)}: "
                    f"[muted]{escape(artifact.detail)}[/muted]"
                )


def print_batch_summary(batch: BatchResult) -> None:
    """Print the closing summary of a run.

    Shows a success message when nothing failed, otherwise the
    succeeded/failed counts followed by the list of failures.
    """
    if batch.backup is not None:
        print_backup(batch.backup)
    if batch.gc_detail:
        console.print(f"[muted]Cleanup: {escape(batch.gc_detail)}[/muted]")

    if not batch.has_failures:
        print_success(f"All {batch.success_count} item(s) in the desired state.")
        return

    console.print(
        f"\n[success]{batch.success_count} succeeded[/success], "
        f"[error]{batch.failed_count} failed[/error] of {batch.total_count}"
    )
    print_failures(batch)


def print_backup(record: BackupRecord) -> None:
    """Print where a backup archive was written."""
    console.print(
        f"[info]Backup:[/info] {escape(str(record.archive_path))} "
        f"[muted]({format_size(record.size_bytes)})[/muted]"
    )


def create_report_table(report: VerificationReport) -> Table:
    """Create a Rich table listing every verification check.

    Args:
        report: Full verification report.

    Returns:
        Rich Table with Status, Group, Check and Detail columns.
    """
    table = Table(
        title="Verification",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=6, justify="center")
    table.add_column("Group", no_wrap=True)
    table.add_column("Check")
    table.add_column("Detail")

    for check in report.checks:
        table.add_row(
            _STATUS_LABELS[check.status],
            check.group or "",
            escape(check.name),
            f"[muted]{escape(check.detail)}[/muted]",
        )

    return table


def print_report_summary(report: VerificationReport) -> None:
    """Print the counts, success rate and health class of a report."""
    style = _HEALTH_STYLES[report.health]
    console.print(
        f"\nChecks: {report.total}  "
        f"[success]passed {report.passed}[/success]  "
        f"[error]failed {report.failed}[/error]  "
        f"[warning]warned {report.warned}[/warning]  "
        f"success rate {report.success_rate:.0%}"
    )
    console.print(f"Health: [{style}]{report.health.value}[/{style}]")


def create_quick_table(report: QuickReport) -> Table:
    """Create a Rich table for the essential application check."""
    table = Table(
        title="Essential Applications",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=6, justify="center")
    table.add_column("Application")
    table.add_column("Detail")

    for check in report.checks:
        table.add_row(
            _STATUS_LABELS[check.status],
            escape(check.name),
            f"[muted]{escape(check.detail)}[/muted]",
        )

    return table
