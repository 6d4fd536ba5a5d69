"""Installation verifier.

Audits the live system against a manifest. Every check queries the
backends or the filesystem directly; nothing is read from the state
store. The report is folded from per-check results.
"""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

from workctl.backends.base import BackendAdapter
from workctl.core.errors import BackendError, BackendUnavailableError
from workctl.core.scaffold import is_executable, resolve_artifact_path
from workctl.models.manifest import Artifact, Group, InstallItem, Manifest
from workctl.models.package import Backend
from workctl.models.report import (
    DEFAULT_THRESHOLDS,
    CheckResult,
    CheckStatus,
    HealthThresholds,
    QuickReport,
    VerificationReport,
)

logger = logging.getLogger(__name__)


def _missing_status(critical: bool) -> CheckStatus:
    return CheckStatus.FAILED if critical else CheckStatus.WARNED


class Verifier:
    """Checks that declared items and artifacts are present.

    Attributes:
        thresholds: Health classification thresholds for full reports.
    """

    def __init__(
        self,
        backends: Mapping[Backend, BackendAdapter],
        thresholds: HealthThresholds = DEFAULT_THRESHOLDS,
        home: Path | None = None,
    ) -> None:
        self._backends = dict(backends)
        self._thresholds = thresholds
        self._home = home

    @property
    def thresholds(self) -> HealthThresholds:
        """Thresholds applied to full reports."""
        return self._thresholds

    def verify(
        self,
        manifest: Manifest,
        groups: Iterable[Group] | None = None,
    ) -> VerificationReport:
        """Run every check for the selected groups.

        Args:
            manifest: Declared state.
            groups: Groups to check. Defaults to all groups of the manifest.

        Returns:
            VerificationReport classified with the configured thresholds.
        """
        selected = list(manifest.groups if groups is None else groups)
        checks: list[CheckResult] = []
        for group in selected:
            logger.info("Verifying group %s", group.name)
            checks.extend(self.check_group(group))

        report = VerificationReport.from_checks(checks, self._thresholds)
        logger.info(
            "Verification: %d passed, %d failed, %d warned of %d (%s)",
            report.passed,
            report.failed,
            report.warned,
            report.total,
            report.health.value,
        )
        return report

    def verify_item(self, group: Group, item: InstallItem) -> VerificationReport:
        """Run the check for a single item."""
        check = self.check_item(item, group.name)
        return VerificationReport.from_checks([check], self._thresholds)

    def quick_verify(self, manifest: Manifest) -> QuickReport:
        """Check the manifest's essential applications only.

        Quick reports are never classified.
        """
        checks = tuple(self.check_item(item) for item in manifest.quick_checks)
        report = QuickReport(checks=checks)
        logger.info("Quick check: %d/%d essential applications", report.passed, report.total)
        return report

    def check_group(self, group: Group) -> list[CheckResult]:
        """Check every item and artifact of a group, items first."""
        checks = [self.check_item(item, group.name) for item in group.items]
        checks.extend(self.check_artifact(artifact, group.name) for artifact in group.artifacts)
        return checks

    def check_item(self, item: InstallItem, group_name: str | None = None) -> CheckResult:
        """Query a backend for an item.

        A missing or broken backend counts as the item being missing,
        with the error as detail.
        """
        label = item.backend.label
        backend = self._backends.get(item.backend)

        if backend is None:
            installed, detail = False, f"no {label} backend"
        else:
            try:
                installed = backend.is_installed(item.identifier)
                detail = f"installed via {label}" if installed else f"not installed ({label})"
            except (BackendUnavailableError, BackendError) as e:
                installed, detail = False, str(e)

        status = CheckStatus.PASSED if installed else _missing_status(item.critical)
        if not installed and not item.critical:
            detail = f"{detail} (optional)"
        return self._result(item.display_name, status, item.critical, group_name, detail)

    def check_artifact(self, artifact: Artifact, group_name: str | None = None) -> CheckResult:
        """Check an artifact on disk.

        Directories must be directories and files must be files. A
        shortcut that exists but is not executable is a warning.
        """
        path = resolve_artifact_path(artifact, self._home)

        if artifact.kind == "directory":
            present = path.is_dir()
        else:
            present = path.is_file()

        if not present:
            status = _missing_status(artifact.critical)
            return self._result(
                artifact.display_name, status, artifact.critical, group_name, f"missing: {path}"
            )

        if artifact.kind == "shortcut" and not is_executable(path):
            return self._result(
                artifact.display_name,
                CheckStatus.WARNED,
                artifact.critical,
                group_name,
                f"not executable: {path}",
            )

        return self._result(
            artifact.display_name, CheckStatus.PASSED, artifact.critical, group_name, str(path)
        )

    @staticmethod
    def _result(
        name: str,
        status: CheckStatus,
        critical: bool,
        group_name: str | None,
        detail: str,
    ) -> CheckResult:
        log = logger.info if status is CheckStatus.PASSED else logger.warning
        log("[%s] %s: %s", status.value, name, detail)
        return CheckResult(
            name=name,
            status=status,
            critical=critical,
            group=group_name,
            detail=detail,
        )
