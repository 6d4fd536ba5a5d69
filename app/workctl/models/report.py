"""Verification report models.

Reports are computed fresh on each verification run by folding over
per-check results; they are never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CheckStatus(str, Enum):
    """Result of a single verification check."""

    PASSED = "passed"
    FAILED = "failed"
    WARNED = "warned"


class Health(str, Enum):
    """Overall classification of a full verification."""

    FULLY_SUCCESSFUL = "fully successful"
    SUCCESSFUL_WITH_WARNINGS = "successful with warnings"
    MOSTLY_SUCCESSFUL = "mostly successful"
    HAS_ISSUES = "has issues"


@dataclass(frozen=True, slots=True)
class HealthThresholds:
    """Thresholds used to classify a report.

    Attributes:
        mostly_successful_below: Failed fraction under which a report with
            failures still counts as mostly successful.
    """

    mostly_successful_below: float = 0.25

    def __post_init__(self) -> None:
        """Validate threshold range."""
        if not 0.0 <= self.mostly_successful_below <= 1.0:
            msg = (
                "mostly_successful_below must be between 0.0 and 1.0, "
                f"got {self.mostly_successful_below}"
            )
            raise ValueError(msg)


DEFAULT_THRESHOLDS = HealthThresholds()


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Outcome of one verification check.

    Attributes:
        name: Human-readable name of what was checked.
        status: Passed, failed or warned.
        critical: Whether the check is critical.
        group: Group the check belongs to, if any.
        detail: Short explanation ("installed via apt", "missing: ~/Workspace").
    """

    name: str
    status: CheckStatus
    critical: bool
    group: str | None = None
    detail: str = ""


@dataclass(frozen=True, slots=True)
class VerificationReport:
    """Aggregated result of a full verification run."""

    total: int
    passed: int
    failed: int
    warned: int
    checks: tuple[CheckResult, ...] = ()
    thresholds: HealthThresholds = DEFAULT_THRESHOLDS

    @classmethod
    def from_checks(
        cls,
        checks: list[CheckResult],
        thresholds: HealthThresholds = DEFAULT_THRESHOLDS,
    ) -> VerificationReport:
        """Fold per-check results into a report.

        Args:
            checks: Check results in execution order.
            thresholds: Classification thresholds.

        Returns:
            New VerificationReport.
        """
        return cls(
            total=len(checks),
            passed=sum(1 for c in checks if c.status is CheckStatus.PASSED),
            failed=sum(1 for c in checks if c.status is CheckStatus.FAILED),
            warned=sum(1 for c in checks if c.status is CheckStatus.WARNED),
            checks=tuple(checks),
            thresholds=thresholds,
        )

    @property
    def success_rate(self) -> float:
        """Fraction of passed checks; 0.0 when nothing was checked."""
        if self.total == 0:
            return 0.0
        return self.passed / self.total

    @property
    def health(self) -> Health:
        """Classify the report using the configured thresholds."""
        if self.failed == 0 and self.warned == 0:
            return Health.FULLY_SUCCESSFUL
        if self.failed == 0:
            return Health.SUCCESSFUL_WITH_WARNINGS
        if self.failed / self.total < self.thresholds.mostly_successful_below:
            return Health.MOSTLY_SUCCESSFUL
        return Health.HAS_ISSUES

    def to_dict(self) -> dict[str, object]:
        """Serialize for JSON output."""
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "warned": self.warned,
            "success_rate": round(self.success_rate, 4),
            "health": self.health.value,
            "checks": [_check_to_dict(c) for c in self.checks],
        }


@dataclass(frozen=True, slots=True)
class QuickReport:
    """Result of the quick essential check; unclassified."""

    checks: tuple[CheckResult, ...] = ()

    @property
    def total(self) -> int:
        """Number of items checked."""
        return len(self.checks)

    @property
    def passed(self) -> int:
        """Number of items present."""
        return sum(1 for c in self.checks if c.status is CheckStatus.PASSED)

    def to_dict(self) -> dict[str, object]:
        """Serialize for JSON output."""
        return {
            "passed": self.passed,
            "total": self.total,
            "checks": [_check_to_dict(c) for c in self.checks],
        }


def _check_to_dict(check: CheckResult) -> dict[str, object]:
    return {
        "name": check.name,
        "status": check.status.value,
        "critical": check.critical,
        "group": check.group,
        "detail": check.detail,
    }
