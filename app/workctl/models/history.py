"""History models for the append-only state log.

The state log stores two kinds of lines: operation results and backup
records. Each JSON line carries a ``kind`` tag so both can share one file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from workctl.models.action import OperationResult


class RecordKind(str, Enum):
    """Tag identifying the type of a state log line."""

    OPERATION = "operation"
    BACKUP = "backup"


@dataclass(frozen=True, slots=True)
class BackupRecord:
    """A compressed archive of user paths taken before a removal.

    Attributes:
        group_name: Group whose removal triggered the backup.
        created_at: When the backup was started (timezone-aware).
        archive_path: Location of the ``.tar.gz`` archive.
        source_paths: Paths included in the archive.
        size_bytes: Archive size on disk.
    """

    group_name: str
    created_at: datetime
    archive_path: Path
    source_paths: frozenset[Path]
    size_bytes: int

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.group_name:
            msg = "Backup group name cannot be empty"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Backup size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage.

        Source paths are sorted so the serialized form is stable.
        """
        return {
            "group_name": self.group_name,
            "created_at": self.created_at.isoformat(),
            "archive_path": str(self.archive_path),
            "source_paths": sorted(str(p) for p in self.source_paths),
            "size_bytes": self.size_bytes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BackupRecord:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If values are invalid.
        """
        return cls(
            group_name=data["group_name"],
            created_at=datetime.fromisoformat(data["created_at"]),
            archive_path=Path(data["archive_path"]),
            source_paths=frozenset(Path(p) for p in data["source_paths"]),
            size_bytes=int(data["size_bytes"]),
        )


StateRecord = OperationResult | BackupRecord


def record_to_json_line(record: StateRecord) -> str:
    """Serialize a state record to a tagged JSON line.

    Args:
        record: Operation result or backup record.

    Returns:
        Single JSON line (no trailing newline).
    """
    kind = RecordKind.BACKUP if isinstance(record, BackupRecord) else RecordKind.OPERATION
    payload = {"kind": kind.value, **record.to_dict()}
    return json.dumps(payload, separators=(",", ":"))


def record_from_json_line(line: str) -> StateRecord:
    """Deserialize a tagged JSON line.

    Args:
        line: Single JSON line (with or without trailing whitespace).

    Returns:
        OperationResult or BackupRecord.

    Raises:
        json.JSONDecodeError: If line is not valid JSON.
        KeyError: If required fields are missing.
        ValueError: If the kind tag or data is invalid.
    """
    data = json.loads(line.strip())
    if not isinstance(data, dict):
        msg = f"expected a JSON object, got {type(data).__name__}"
        raise ValueError(msg)
    kind = RecordKind(data.pop("kind"))
    if kind is RecordKind.BACKUP:
        return BackupRecord.from_dict(data)
    return OperationResult.from_dict(data)
