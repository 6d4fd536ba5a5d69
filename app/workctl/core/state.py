"""State store for operation and backup history.

This module provides the StateStore class for persisting and querying
operation results and backup records in a JSONL file.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from types import TracebackType
from typing import IO

from workctl.core.paths import ensure_state_dir, get_state_dir
from workctl.models.action import OperationResult
from workctl.models.history import (
    BackupRecord,
    StateRecord,
    record_from_json_line,
    record_to_json_line,
)

logger = logging.getLogger(__name__)


class StateStore:
    """Append-only history of operation results and backups.

    Storage location: ~/.local/state/workctl/history.jsonl

    Every record is written as one tagged JSON line, flushed and fsync'ed
    before ``record`` returns, so an interrupted run loses at most the
    line being written. The file handle is opened lazily on the first
    write and kept until ``close``.

    Attributes:
        state_dir: Directory containing the history file.
    """

    HISTORY_FILENAME = "history.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize StateStore.

        Args:
            state_dir: Optional override for state directory.
                      Default: ~/.local/state/workctl
        """
        self._state_dir = state_dir if state_dir is not None else get_state_dir()
        self._handle: IO[str] | None = None

    @property
    def history_path(self) -> Path:
        """Path to history.jsonl file."""
        return self._state_dir / self.HISTORY_FILENAME

    def __enter__(self) -> StateStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def record(self, result: OperationResult) -> None:
        """Append an operation result.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        self._append(result)

    def record_backup(self, backup: BackupRecord) -> None:
        """Append a backup record.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        self._append(backup)

    def close(self) -> None:
        """Flush and close the history file. Safe to call repeatedly."""
        if self._handle is None:
            return
        try:
            self._handle.flush()
            os.fsync(self._handle.fileno())
        finally:
            self._handle.close()
            self._handle = None

    def history(self, limit: int | None = None) -> list[StateRecord]:
        """Read all records, newest first.

        Corrupt lines are skipped with a warning.

        Args:
            limit: Maximum number of records to return.

        Returns:
            Operation results and backup records, newest first.
            Empty list if the file doesn't exist.
        """
        if not self.history_path.exists():
            return []

        records: list[StateRecord] = []
        with self.history_path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(record_from_json_line(line))
                except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                    logger.warning("Skipping corrupt history line %d: %s", line_num, e)

        records.reverse()
        if limit is not None:
            return records[:limit]
        return records

    def operations(self, limit: int | None = None) -> list[OperationResult]:
        """Operation results only, newest first."""
        results = [r for r in self.history() if isinstance(r, OperationResult)]
        return results[:limit] if limit is not None else results

    def backups(self, limit: int | None = None) -> list[BackupRecord]:
        """Backup records only, newest first."""
        backups = [r for r in self.history() if isinstance(r, BackupRecord)]
        return backups[:limit] if limit is not None else backups

    def latest_backup(self, group_name: str) -> BackupRecord | None:
        """Most recent backup taken for a group, if any."""
        for backup in self.backups():
            if backup.group_name == group_name:
                return backup
        return None

    def _append(self, record: StateRecord) -> None:
        handle = self._open()
        handle.write(record_to_json_line(record) + "\n")
        handle.flush()
        os.fsync(handle.fileno())

    def _open(self) -> IO[str]:
        if self._handle is None:
            if self._state_dir == get_state_dir():
                ensure_state_dir()
            else:
                self._state_dir.mkdir(parents=True, exist_ok=True)
            self._handle = self.history_path.open(mode="a", encoding="utf-8")
        return self._handle
