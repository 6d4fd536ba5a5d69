"""Data models for workctl.

This module exports the core data structures used throughout the application.
"""

from workctl.models.action import (
    ArtifactResult,
    BatchResult,
    Direction,
    GroupResult,
    OperationResult,
    Outcome,
)
from workctl.models.history import (
    BackupRecord,
    RecordKind,
    StateRecord,
    record_from_json_line,
    record_to_json_line,
)
from workctl.models.manifest import Artifact, Group, InstallItem, Manifest
from workctl.models.package import Backend
from workctl.models.report import (
    CheckResult,
    CheckStatus,
    Health,
    HealthThresholds,
    QuickReport,
    VerificationReport,
)

__all__ = [
    "Artifact",
    "ArtifactResult",
    "Backend",
    "BackupRecord",
    "BatchResult",
    "CheckResult",
    "CheckStatus",
    "Direction",
    "Group",
    "GroupResult",
    "Health",
    "HealthThresholds",
    "InstallItem",
    "Manifest",
    "OperationResult",
    "Outcome",
    "QuickReport",
    "RecordKind",
    "StateRecord",
    "VerificationReport",
    "record_from_json_line",
    "record_to_json_line",
]
