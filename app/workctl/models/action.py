"""Operation models for convergence runs.

Defines the desired-state direction, per-item outcomes, and the
aggregates returned by the convergence engine.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from workctl.models.manifest import Artifact, InstallItem

if TYPE_CHECKING:
    from workctl.models.history import BackupRecord


class Direction(str, Enum):
    """Desired state for a convergence run.

    Attributes:
        PRESENT: Items should be installed.
        ABSENT: Items should be removed.
    """

    PRESENT = "present"
    ABSENT = "absent"

    @property
    def verb(self) -> str:
        """Verb used in output ("install" or "remove")."""
        return "install" if self is Direction.PRESENT else "remove"


class Outcome(str, Enum):
    """Result of converging a single item.

    Attributes:
        APPLIED: The backend changed state (installed or removed).
        ALREADY_SATISFIED: State already matched, nothing was done.
        FAILED: The backend operation failed after retries.
        SKIPPED: Not attempted (dry-run, backend missing, retained item,
            or backup failure).
    """

    APPLIED = "applied"
    ALREADY_SATISFIED = "already_satisfied"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_success(self) -> bool:
        """Whether the item is in the desired state after the run."""
        return self in (Outcome.APPLIED, Outcome.ALREADY_SATISFIED)


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of one item in one invocation.

    Appended to the state store and never mutated.

    Attributes:
        item: The item that was converged.
        direction: Desired state of the run.
        outcome: What happened.
        timestamp: When the outcome was determined (timezone-aware).
        detail: Short explanation or backend error summary.
    """

    item: InstallItem
    direction: Direction
    outcome: Outcome
    timestamp: datetime
    detail: str = ""

    @property
    def success(self) -> bool:
        """Check if the item reached the desired state."""
        return self.outcome.is_success

    @property
    def failed(self) -> bool:
        """Check if the item failed."""
        return self.outcome is Outcome.FAILED

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "item": self.item.model_dump(mode="json"),
            "direction": self.direction.value,
            "outcome": self.outcome.value,
            "timestamp": self.timestamp.isoformat(),
            "detail": self.detail,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OperationResult:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If enum values or the item are invalid.
        """
        return cls(
            item=InstallItem.model_validate(data["item"]),
            direction=Direction(data["direction"]),
            outcome=Outcome(data["outcome"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            detail=data.get("detail", ""),
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))


@dataclass(frozen=True, slots=True)
class ArtifactResult:
    """Outcome of creating or removing one scaffolding artifact.

    Reported and logged only; artifacts are not part of the state store.
    """

    artifact: Artifact
    outcome: Outcome
    detail: str = ""


@dataclass(frozen=True, slots=True)
class GroupResult:
    """Aggregate outcome of converging one group.

    Attributes:
        group_name: Name of the converged group.
        direction: Desired state of the run.
        results: One OperationResult per item, in group order.
        backup: Archive created before removal, if any.
        artifacts: Scaffolding outcomes, in manifest order.
    """

    group_name: str
    direction: Direction
    results: tuple[OperationResult, ...] = ()
    backup: BackupRecord | None = None
    artifacts: tuple[ArtifactResult, ...] = ()

    @property
    def total_count(self) -> int:
        """Number of items attempted."""
        return len(self.results)

    @property
    def success_count(self) -> int:
        """Items applied or already satisfied."""
        return sum(1 for r in self.results if r.success)

    @property
    def failed_count(self) -> int:
        """Items whose backend operation failed."""
        return sum(1 for r in self.results if r.failed)

    @property
    def skipped_count(self) -> int:
        """Items that were not attempted."""
        return sum(1 for r in self.results if r.outcome is Outcome.SKIPPED)

    def count(self, outcome: Outcome) -> int:
        """Number of results with a given outcome."""
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def artifact_failed_count(self) -> int:
        """Scaffolding artifacts that could not be created or removed."""
        return sum(1 for a in self.artifacts if a.outcome is Outcome.FAILED)


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Aggregate of several group convergences.

    Attributes:
        groups: Per-group results, in processing order.
        backup: Whole-profile archive taken before a full removal, if any.
        gc_detail: Outcome of the garbage-collection pass, if one ran.
    """

    groups: tuple[GroupResult, ...] = ()
    backup: BackupRecord | None = None
    gc_detail: str | None = None

    @property
    def results(self) -> list[OperationResult]:
        """All item results across groups."""
        return [r for group in self.groups for r in group.results]

    @property
    def total_count(self) -> int:
        """Number of items attempted across groups."""
        return sum(group.total_count for group in self.groups)

    @property
    def success_count(self) -> int:
        """Items applied or already satisfied across groups."""
        return sum(group.success_count for group in self.groups)

    @property
    def failed_count(self) -> int:
        """Failed items across groups."""
        return sum(group.failed_count for group in self.groups)

    @property
    def has_failures(self) -> bool:
        """Whether any item or artifact failed."""
        return any(g.failed_count or g.artifact_failed_count for g in self.groups)
