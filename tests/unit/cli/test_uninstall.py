"""Unit tests for the uninstall command."""

from pathlib import Path

import pytest
from fakes import FakeBackend
from typer.testing import CliRunner
from workctl.cli.main import app
from workctl.core.config import WorkctlConfig, save_config
from workctl.core.errors import BackendError
from workctl.core.state import StateStore
from workctl.models.package import Backend

runner = CliRunner()


@pytest.fixture
def installed(
    cli_backends: dict[Backend, FakeBackend], isolated_home: Path
) -> dict[Backend, FakeBackend]:
    """Everything from the sample manifest is installed and scaffolded."""
    result = runner.invoke(app, ["install", "--all", "--yes"])
    assert result.exit_code == 0
    cli_backends[Backend.PRIMARY].calls.clear()
    cli_backends[Backend.SECONDARY].calls.clear()
    return cli_backends


class TestUninstallGroups:
    """Tests for removing selected groups."""

    def test_removes_group(self, installed: dict[Backend, FakeBackend]) -> None:
        """Items of the group are removed."""
        result = runner.invoke(app, ["uninstall", "--group", "finance", "--yes"])

        assert result.exit_code == 0
        assert installed[Backend.PRIMARY].installed == {"git"}

    def test_retained_items_stay(self, installed: dict[Backend, FakeBackend]) -> None:
        """Non-removable packages are kept."""
        result = runner.invoke(app, ["uninstall", "--group", "dev-tools", "--yes"])

        assert result.exit_code == 0
        assert "git" in installed[Backend.PRIMARY].installed
        assert installed[Backend.SECONDARY].installed == set()
        assert "retained on removal" in result.output

    def test_declined(self, installed: dict[Backend, FakeBackend]) -> None:
        """Answering no removes nothing."""
        result = runner.invoke(app, ["uninstall", "--group", "finance"], input="n\n")

        assert result.exit_code == 0
        assert "Aborted." in result.output
        assert installed[Backend.PRIMARY].calls == []

    def test_backup_before_removal(
        self, installed: dict[Backend, FakeBackend], isolated_home: Path
    ) -> None:
        """The group's user paths are archived first."""
        result = runner.invoke(app, ["uninstall", "--group", "workspace", "--yes"])

        assert result.exit_code == 0
        backup = StateStore().latest_backup("workspace")
        assert backup is not None
        assert backup.archive_path.exists()

    def test_yes_deletes_user_data(
        self, installed: dict[Backend, FakeBackend], isolated_home: Path
    ) -> None:
        """--yes also answers the user data question."""
        runner.invoke(app, ["uninstall", "--group", "workspace", "--yes"])

        assert not (isolated_home / "Workspace").exists()

    def test_keep_data(self, installed: dict[Backend, FakeBackend], isolated_home: Path) -> None:
        """--keep-data keeps workspace directories and templates."""
        runner.invoke(app, ["uninstall", "--group", "workspace", "--yes", "--keep-data"])

        assert (isolated_home / "Workspace").is_dir()
        assert (isolated_home / "Templates" / "Invoice.csv").exists()
        assert not (isolated_home / "Desktop" / "Workspace.desktop").exists()

    def test_user_data_declined(
        self, installed: dict[Backend, FakeBackend], isolated_home: Path
    ) -> None:
        """Declining the user data question keeps the workspace."""
        result = runner.invoke(app, ["uninstall", "--group", "workspace"], input="y\nn\n")

        assert result.exit_code == 0
        assert (isolated_home / "Workspace").is_dir()

    def test_failure_exits_3(self, installed: dict[Backend, FakeBackend]) -> None:
        """A failed removal gives exit code 3."""
        installed[Backend.PRIMARY].fail("gnucash", BackendError("dpkg: error processing"))

        result = runner.invoke(app, ["uninstall", "--group", "finance", "--yes"])

        assert result.exit_code == 3
        assert "gnucash" in installed[Backend.PRIMARY].installed

    def test_dry_run(self, installed: dict[Backend, FakeBackend], isolated_home: Path) -> None:
        """Dry-run removes nothing and writes no backup."""
        result = runner.invoke(app, ["uninstall", "--group", "workspace", "--dry-run", "--yes"])

        assert result.exit_code == 0
        assert (isolated_home / "Workspace").is_dir()
        assert StateStore().backups() == []


class TestUninstallAll:
    """Tests for the complete removal."""

    def test_declined_first_prompt(
        self, installed: dict[Backend, FakeBackend], isolated_home: Path
    ) -> None:
        """No records, no backups and exit 0 after a 'no'."""
        records_before = len(StateStore().history())

        result = runner.invoke(app, ["uninstall", "--all"], input="n\n")

        assert result.exit_code == 0
        assert "Aborted. Nothing was changed." in result.output
        assert installed[Backend.PRIMARY].calls == []
        assert len(StateStore().history()) == records_before
        assert not (isolated_home / ".local" / "state" / "workctl" / "backups").exists()

    def test_wrong_phrase_then_no(self, installed: dict[Backend, FakeBackend]) -> None:
        """The phrase is asked again until typed exactly or refused."""
        result = runner.invoke(app, ["uninstall", "--all"], input="y\nyes\nno\n")

        assert result.exit_code == 0
        assert installed[Backend.PRIMARY].calls == []

    def test_yes_still_requires_phrase(self, installed: dict[Backend, FakeBackend]) -> None:
        """--yes skips the question but not the typed phrase."""
        result = runner.invoke(app, ["uninstall", "--all", "--yes"], input="no\n")

        assert result.exit_code == 0
        assert "ABSOLUTELY" in result.output
        assert "Aborted. Nothing was changed." in result.output
        assert installed[Backend.PRIMARY].calls == []

    def test_confirmed(self, installed: dict[Backend, FakeBackend], isolated_home: Path) -> None:
        """Typing the phrase removes everything after a full backup."""
        result = runner.invoke(app, ["uninstall", "--all"], input="y\nYES\n")

        assert result.exit_code == 0
        assert installed[Backend.PRIMARY].installed == {"git"}
        assert installed[Backend.SECONDARY].installed == set()
        assert not (isolated_home / "Workspace").exists()
        assert StateStore().latest_backup("all") is not None
        assert installed[Backend.PRIMARY].gc_count == 1

    def test_keep_data(self, installed: dict[Backend, FakeBackend], isolated_home: Path) -> None:
        """--keep-data applies to the complete removal too."""
        result = runner.invoke(app, ["uninstall", "--all", "--yes", "--keep-data"], input="YES\n")

        assert result.exit_code == 0
        assert (isolated_home / "Workspace").is_dir()

    def test_backup_failure_aborts(
        self, installed: dict[Backend, FakeBackend], tmp_path: Path
    ) -> None:
        """Nothing is removed when the full backup cannot be written."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        save_config(WorkctlConfig(backup_dir=blocker / "backups"))

        result = runner.invoke(app, ["uninstall", "--all", "--yes"], input="YES\n")

        assert result.exit_code == 1
        assert "nothing was removed" in result.output
        assert installed[Backend.PRIMARY].calls == []
