"""Unit tests for XDG path management.

Tests for the paths module that provides XDG-compliant directory paths.
"""

from pathlib import Path

import pytest
from workctl.core.paths import (
    APP_NAME,
    ensure_backup_dir,
    ensure_log_dir,
    expand_user_path,
    get_config_dir,
    get_config_path,
    get_history_path,
    get_lock_path,
    get_log_path,
    get_manifest_path,
    get_state_dir,
)


class TestXdgDirs:
    """Tests for the XDG base directories."""

    def test_config_dir_from_env(self, isolated_home: Path) -> None:
        """XDG_CONFIG_HOME is honoured."""
        assert get_config_dir() == isolated_home / ".config" / APP_NAME

    def test_state_dir_from_env(self, isolated_home: Path) -> None:
        """XDG_STATE_HOME is honoured."""
        assert get_state_dir() == isolated_home / ".local" / "state" / APP_NAME

    def test_defaults_without_env(
        self, isolated_home: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Unset variables fall back to the home directory."""
        monkeypatch.delenv("XDG_CONFIG_HOME")
        monkeypatch.delenv("XDG_STATE_HOME")

        assert get_config_dir() == isolated_home / ".config" / APP_NAME
        assert get_state_dir() == isolated_home / ".local/state" / APP_NAME

    def test_empty_env_ignored(self, isolated_home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """An empty variable counts as unset."""
        monkeypatch.setenv("XDG_STATE_HOME", "")

        assert get_state_dir() == isolated_home / ".local/state" / APP_NAME


class TestFilePaths:
    """Tests for the file locations."""

    def test_config_files(self) -> None:
        """Config and manifest live in the config directory."""
        assert get_config_path() == get_config_dir() / "config.toml"
        assert get_manifest_path() == get_config_dir() / "manifest.toml"

    def test_state_files(self) -> None:
        """History, logs and lock live in the state directory."""
        assert get_history_path() == get_state_dir() / "history.jsonl"
        assert get_log_path("install") == get_state_dir() / "logs" / "install.log"
        assert get_lock_path() == get_state_dir() / "workctl.lock"


class TestEnsureDirs:
    """Tests for directory creation."""

    def test_ensure_log_dir(self) -> None:
        """The log directory is created."""
        assert ensure_log_dir().is_dir()

    def test_ensure_custom_backup_dir(self, tmp_path: Path) -> None:
        """A custom backup directory is created."""
        target = tmp_path / "archives" / "workctl"
        assert ensure_backup_dir(target) == target
        assert target.is_dir()

    def test_ensure_fails_cleanly(self, tmp_path: Path) -> None:
        """Failures surface as RuntimeError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        with pytest.raises(RuntimeError, match="Cannot create backup directory"):
            ensure_backup_dir(blocker / "backups")


def test_expand_user_path(isolated_home: Path) -> None:
    """``~`` expands to HOME."""
    assert expand_user_path("~/Workspace") == isolated_home / "Workspace"
    assert expand_user_path("/srv/data") == Path("/srv/data")
