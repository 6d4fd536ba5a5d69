"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from fakes import FakeBackend
from workctl.core.log import reset_logging
from workctl.models.manifest import Artifact, Group, InstallItem, Manifest
from workctl.models.package import Backend


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point HOME and the XDG directories into the test's tmp_path.

    Also detaches log handlers installed by the CLI after each test.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(home / ".local" / "state"))
    yield home
    reset_logging()


@pytest.fixture
def fixed_now() -> datetime:
    """A fixed, timezone-aware timestamp."""
    return datetime(2026, 3, 14, 9, 30, 0, tzinfo=UTC)


@pytest.fixture
def apt_item() -> InstallItem:
    """A critical APT item."""
    return InstallItem(backend=Backend.PRIMARY, identifier="gnucash", display_name="GnuCash")


@pytest.fixture
def snap_item() -> InstallItem:
    """A Snap item installed with --classic."""
    return InstallItem(
        backend=Backend.SECONDARY,
        identifier="code",
        display_name="VS Code",
        install_args=("--classic",),
    )


@pytest.fixture
def finance_group() -> Group:
    """Three APT items, one optional, with a backup path."""
    return Group(
        name="finance",
        title="Finance Suite",
        backup_paths=("~/.local/share/gnucash",),
        items=(
            InstallItem(backend=Backend.PRIMARY, identifier="gnucash", display_name="GnuCash"),
            InstallItem(backend=Backend.PRIMARY, identifier="kmymoney", display_name="KMyMoney"),
            InstallItem(
                backend=Backend.PRIMARY,
                identifier="homebank",
                display_name="HomeBank",
                critical=False,
            ),
        ),
    )


@pytest.fixture
def dev_group() -> Group:
    """An APT item that is never removed and a Snap item."""
    return Group(
        name="dev-tools",
        title="Development Tools",
        items=(
            InstallItem(
                backend=Backend.PRIMARY,
                identifier="git",
                display_name="Git",
                removable=False,
            ),
            InstallItem(
                backend=Backend.SECONDARY,
                identifier="code",
                display_name="VS Code",
                install_args=("--classic",),
            ),
        ),
    )


@pytest.fixture
def workspace_group() -> Group:
    """Scaffolding only: a user-data tree, a template and a shortcut."""
    return Group(
        name="workspace",
        title="Workspace & Shortcuts",
        backup_paths=("~/Workspace",),
        artifacts=(
            Artifact(
                path="~/Workspace",
                display_name="Main Workspace",
                kind="directory",
                user_data=True,
            ),
            Artifact(
                path="~/Workspace/Projects",
                display_name="Projects Directory",
                kind="directory",
                user_data=True,
            ),
            Artifact(
                path="~/Templates/Invoice.csv",
                display_name="Invoice Template",
                content='"INV-001","{date}"\n',
                user_data=True,
            ),
            Artifact(
                path="~/Desktop/Workspace.desktop",
                display_name="Workspace Shortcut",
                kind="shortcut",
                content="[Desktop Entry]\nExec=xdg-open {home}/Workspace\n",
                critical=False,
            ),
        ),
    )


@pytest.fixture
def sample_manifest(finance_group: Group, dev_group: Group, workspace_group: Group) -> Manifest:
    """A small manifest with three groups and two quick checks."""
    return Manifest(
        groups=(finance_group, dev_group, workspace_group),
        quick_checks=(
            InstallItem(backend=Backend.PRIMARY, identifier="gnucash", display_name="GnuCash"),
            InstallItem(backend=Backend.SECONDARY, identifier="code", display_name="VS Code"),
        ),
        full_backup_paths=("~/Workspace", "~/.config"),
    )


@pytest.fixture
def apt_backend() -> FakeBackend:
    """In-memory primary backend with nothing installed."""
    return FakeBackend(Backend.PRIMARY)


@pytest.fixture
def snap_backend() -> FakeBackend:
    """In-memory secondary backend bootstrapped through ``snapd``."""
    return FakeBackend(Backend.SECONDARY, bootstrap_package="snapd")


@pytest.fixture
def fake_backends(
    apt_backend: FakeBackend, snap_backend: FakeBackend
) -> dict[Backend, FakeBackend]:
    """Both fake backends keyed by channel."""
    return {Backend.PRIMARY: apt_backend, Backend.SECONDARY: snap_backend}
