"""Unit tests for the log command."""

from typer.testing import CliRunner
from workctl.cli.main import app
from workctl.core.paths import get_log_path

runner = CliRunner()


def _write_log(mode: str, count: int) -> None:
    path = get_log_path(mode)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"[2026-03-14] INFO workctl: line {i}\n" for i in range(count)))


class TestLogCommand:
    """Tests for workctl log install|verify|uninstall."""

    def test_missing_log(self) -> None:
        """A mode that never ran says so."""
        result = runner.invoke(app, ["log", "verify"])

        assert result.exit_code == 0
        assert "No verify log yet" in result.output

    def test_install_tail(self) -> None:
        """By default the last 50 lines are shown."""
        _write_log("install", 60)

        result = runner.invoke(app, ["log", "install"])

        assert result.exit_code == 0
        assert "line 59" in result.output
        assert "line 10\n" in result.output
        assert "line 9\n" not in result.output

    def test_lines_option(self) -> None:
        """--lines limits the tail."""
        _write_log("uninstall", 5)

        result = runner.invoke(app, ["log", "uninstall", "-n", "2"])

        assert "line 4" in result.output
        assert "line 3" in result.output
        assert "line 2" not in result.output

    def test_brackets_printed_literally(self) -> None:
        """Log lines are not read as Rich markup."""
        _write_log("verify", 1)

        result = runner.invoke(app, ["log", "verify"])

        assert "[2026-03-14] INFO workctl: line 0" in result.output

    def test_path_only(self) -> None:
        """--path prints where the log lives."""
        result = runner.invoke(app, ["log", "verify", "--path"])

        assert result.exit_code == 0
        assert result.output.strip() == str(get_log_path("verify"))

    def test_unknown_mode_is_usage_error(self) -> None:
        """Only install, verify and uninstall keep logs."""
        result = runner.invoke(app, ["log", "history"])

        assert result.exit_code == 2
