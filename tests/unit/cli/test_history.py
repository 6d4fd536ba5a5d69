"""Unit tests for history command.

Tests for the CLI history command implementation.
"""

import json
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner
from workctl.cli.main import app
from workctl.core.state import StateStore
from workctl.models.action import Direction, OperationResult, Outcome
from workctl.models.history import BackupRecord
from workctl.models.manifest import InstallItem

runner = CliRunner()


@pytest.fixture
def populated(apt_item: InstallItem, snap_item: InstallItem, fixed_now: datetime) -> StateStore:
    """History with two outcomes and one backup."""
    with StateStore() as store:
        store.record(
            OperationResult(
                item=apt_item,
                direction=Direction.PRESENT,
                outcome=Outcome.APPLIED,
                timestamp=fixed_now,
                detail="installed via apt",
            )
        )
        store.record_backup(
            BackupRecord(
                group_name="finance",
                created_at=fixed_now + timedelta(minutes=1),
                archive_path=Path("/tmp/finance_backup.tar.gz"),
                source_paths=frozenset({Path("/home/ana/.local/share/gnucash")}),
                size_bytes=4096,
            )
        )
        store.record(
            OperationResult(
                item=snap_item,
                direction=Direction.ABSENT,
                outcome=Outcome.FAILED,
                timestamp=fixed_now + timedelta(minutes=2),
                detail="snap has a change in progress",
            )
        )
    return store


class TestHistoryCommand:
    """Tests for workctl history."""

    def test_empty(self) -> None:
        """No history prints a hint."""
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "No history entries found." in result.output

    def test_table(self, populated: StateStore) -> None:
        """Outcomes are listed in a table."""
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "Install History" in result.output
        assert "gnucash" in result.output
        assert "code" in result.output

    def test_json_newest_first(self, populated: StateStore) -> None:
        """--json prints outcomes newest first."""
        result = runner.invoke(app, ["history", "--json"])

        data = json.loads(result.output)
        assert [entry["item"]["identifier"] for entry in data] == ["code", "gnucash"]
        assert data[0]["outcome"] == "failed"
        assert data[0]["direction"] == "absent"

    def test_limit(self, populated: StateStore) -> None:
        """--limit caps the number of entries."""
        result = runner.invoke(app, ["history", "--json", "--limit", "1"])

        assert len(json.loads(result.output)) == 1

    def test_limit_must_be_positive(self) -> None:
        """--limit 0 is a usage error."""
        result = runner.invoke(app, ["history", "--limit", "0"])

        assert result.exit_code == 2

    def test_backups(self, populated: StateStore) -> None:
        """--backups lists archives instead of outcomes."""
        result = runner.invoke(app, ["history", "--backups", "--json"])

        data = json.loads(result.output)
        assert len(data) == 1
        assert data[0]["group_name"] == "finance"
        assert data[0]["size_bytes"] == 4096

    def test_backups_table(self, populated: StateStore) -> None:
        """Backup sizes are human readable."""
        result = runner.invoke(app, ["history", "--backups"])

        assert "Backups" in result.output
        assert "4.0 KB" in result.output

    def test_no_backups(self) -> None:
        """No backups prints a hint."""
        result = runner.invoke(app, ["history", "--backups"])

        assert "No backups recorded." in result.output
