"""Unit tests for core/verifier.py."""

import stat
from pathlib import Path

import pytest
from fakes import FakeBackend
from workctl.core.verifier import Verifier
from workctl.models.manifest import Artifact, Group, InstallItem, Manifest
from workctl.models.package import Backend
from workctl.models.report import CheckStatus, Health, HealthThresholds


@pytest.fixture
def verifier(fake_backends: dict[Backend, FakeBackend]) -> Verifier:
    """Verifier over the fake backends."""
    return Verifier(fake_backends)


class TestCheckItem:
    """Tests for Verifier.check_item()."""

    def test_installed_item_passes(
        self, verifier: Verifier, apt_backend: FakeBackend, apt_item: InstallItem
    ) -> None:
        """A present item passes with the backend named."""
        apt_backend.installed.add("gnucash")

        check = verifier.check_item(apt_item, "finance")

        assert check.status is CheckStatus.PASSED
        assert check.detail == "installed via apt"
        assert check.group == "finance"

    def test_missing_critical_item_fails(self, verifier: Verifier, apt_item: InstallItem) -> None:
        """A missing critical item fails."""
        check = verifier.check_item(apt_item)

        assert check.status is CheckStatus.FAILED
        assert check.detail == "not installed (apt)"

    def test_missing_optional_item_warns(self, verifier: Verifier) -> None:
        """A missing optional item only warns."""
        item = InstallItem(
            backend=Backend.PRIMARY, identifier="homebank", display_name="HomeBank", critical=False
        )

        check = verifier.check_item(item)

        assert check.status is CheckStatus.WARNED
        assert check.detail == "not installed (apt) (optional)"

    def test_unavailable_backend_counts_as_missing(
        self, verifier: Verifier, snap_backend: FakeBackend, snap_item: InstallItem
    ) -> None:
        """The backend error becomes the detail."""
        snap_backend.available = False

        check = verifier.check_item(snap_item)

        assert check.status is CheckStatus.FAILED
        assert check.detail == "snap is not available"

    def test_missing_backend(self, apt_backend: FakeBackend, snap_item: InstallItem) -> None:
        """Items of an unconfigured backend fail."""
        verifier = Verifier({Backend.PRIMARY: apt_backend})

        check = verifier.check_item(snap_item)

        assert check.status is CheckStatus.FAILED
        assert check.detail == "no snap backend"


class TestCheckArtifact:
    """Tests for Verifier.check_artifact()."""

    def test_existing_directory_passes(self, verifier: Verifier, isolated_home: Path) -> None:
        """A directory artifact passes when the directory exists."""
        (isolated_home / "Workspace").mkdir()
        artifact = Artifact(path="~/Workspace", display_name="Workspace", kind="directory")

        assert verifier.check_artifact(artifact).status is CheckStatus.PASSED

    def test_file_where_directory_expected(self, verifier: Verifier, isolated_home: Path) -> None:
        """A plain file does not satisfy a directory artifact."""
        (isolated_home / "Workspace").write_text("")
        artifact = Artifact(path="~/Workspace", display_name="Workspace", kind="directory")

        check = verifier.check_artifact(artifact)

        assert check.status is CheckStatus.FAILED
        assert check.detail == f"missing: {isolated_home / 'Workspace'}"

    def test_missing_optional_artifact_warns(self, verifier: Verifier) -> None:
        """Non-critical artifacts only warn."""
        artifact = Artifact(
            path="~/Templates/Invoice.csv", display_name="Invoice", content="x", critical=False
        )

        assert verifier.check_artifact(artifact).status is CheckStatus.WARNED

    def test_non_executable_shortcut_warns(self, verifier: Verifier, isolated_home: Path) -> None:
        """A shortcut without an execute bit is a warning."""
        shortcut = isolated_home / "Desktop" / "Workspace.desktop"
        shortcut.parent.mkdir()
        shortcut.write_text("[Desktop Entry]\n")
        shortcut.chmod(stat.S_IRUSR | stat.S_IWUSR)
        artifact = Artifact(
            path="~/Desktop/Workspace.desktop",
            display_name="Shortcut",
            kind="shortcut",
            content="[Desktop Entry]\n",
        )

        check = verifier.check_artifact(artifact)

        assert check.status is CheckStatus.WARNED
        assert check.detail.startswith("not executable:")

    def test_custom_home(self, fake_backends: dict[Backend, FakeBackend], tmp_path: Path) -> None:
        """``~`` resolves against the given home."""
        other = tmp_path / "other"
        (other / "Workspace").mkdir(parents=True)
        verifier = Verifier(fake_backends, home=other)
        artifact = Artifact(path="~/Workspace", display_name="Workspace", kind="directory")

        assert verifier.check_artifact(artifact).status is CheckStatus.PASSED


class TestVerify:
    """Tests for full verification."""

    def test_all_installed_is_fully_successful(
        self,
        verifier: Verifier,
        apt_backend: FakeBackend,
        snap_backend: FakeBackend,
        finance_group: Group,
        dev_group: Group,
    ) -> None:
        """Everything present means full success."""
        apt_backend.installed.update({"gnucash", "kmymoney", "homebank", "git"})
        snap_backend.installed.add("code")
        manifest = Manifest(groups=(finance_group, dev_group))

        report = verifier.verify(manifest)

        assert report.total == 5
        assert report.passed == 5
        assert report.health is Health.FULLY_SUCCESSFUL
        assert report.success_rate == 1.0

    def test_only_optional_missing_warns(
        self, verifier: Verifier, apt_backend: FakeBackend, finance_group: Group
    ) -> None:
        """Missing optional items give success with warnings."""
        apt_backend.installed.update({"gnucash", "kmymoney"})

        report = verifier.verify(Manifest(groups=(finance_group,)))

        assert report.failed == 0
        assert report.warned == 1
        assert report.health is Health.SUCCESSFUL_WITH_WARNINGS

    def test_nothing_installed_has_issues(
        self, verifier: Verifier, sample_manifest: Manifest
    ) -> None:
        """A bare system has issues."""
        report = verifier.verify(sample_manifest)

        assert report.passed == 0
        assert report.health is Health.HAS_ISSUES

    def test_repeated_verification_is_identical(
        self,
        verifier: Verifier,
        apt_backend: FakeBackend,
        snap_backend: FakeBackend,
        sample_manifest: Manifest,
    ) -> None:
        """Two runs without a state change give the same report."""
        apt_backend.installed.update({"gnucash", "git"})
        snap_backend.installed.add("code")

        first = verifier.verify(sample_manifest)
        second = verifier.verify(sample_manifest)

        assert (first.total, first.passed, first.failed, first.warned) == (
            second.total,
            second.passed,
            second.failed,
            second.warned,
        )
        assert [(c.name, c.status) for c in first.checks] == [
            (c.name, c.status) for c in second.checks
        ]
        assert first.health is second.health

    def test_group_selection(
        self, verifier: Verifier, sample_manifest: Manifest, dev_group: Group
    ) -> None:
        """Only the selected groups are checked."""
        report = verifier.verify(sample_manifest, [dev_group])

        assert report.total == 2
        assert {c.group for c in report.checks} == {"dev-tools"}

    def test_items_before_artifacts(
        self, verifier: Verifier, workspace_group: Group
    ) -> None:
        """Artifact checks follow item checks in manifest order."""
        checks = verifier.check_group(workspace_group)

        assert [c.name for c in checks] == [a.display_name for a in workspace_group.artifacts]

    def test_empty_selection(self, verifier: Verifier, sample_manifest: Manifest) -> None:
        """Verifying no groups yields an empty report."""
        report = verifier.verify(sample_manifest, [])

        assert report.total == 0
        assert report.success_rate == 0.0

    def test_thresholds_are_applied(
        self,
        fake_backends: dict[Backend, FakeBackend],
        apt_backend: FakeBackend,
        finance_group: Group,
    ) -> None:
        """One failure in three is mostly successful under a 0.5 threshold."""
        apt_backend.installed.update({"kmymoney", "homebank"})
        verifier = Verifier(fake_backends, HealthThresholds(mostly_successful_below=0.5))

        report = verifier.verify(Manifest(groups=(finance_group,)))

        assert report.failed == 1
        assert report.health is Health.MOSTLY_SUCCESSFUL

    def test_verify_item(
        self,
        verifier: Verifier,
        snap_backend: FakeBackend,
        dev_group: Group,
        snap_item: InstallItem,
    ) -> None:
        """A single item yields a one-check report."""
        snap_backend.installed.add("code")

        report = verifier.verify_item(dev_group, snap_item)

        assert report.total == 1
        assert report.passed == 1
        assert report.checks[0].group == "dev-tools"


class TestQuickVerify:
    """Tests for the essential applications check."""

    def test_four_of_five(self, verifier: Verifier, apt_backend: FakeBackend) -> None:
        """Counts present essential applications."""
        names = ["libreoffice", "firefox", "thunderbird", "gnucash", "gimp"]
        apt_backend.installed.update(names[:4])
        manifest = Manifest(
            quick_checks=tuple(
                InstallItem(backend=Backend.PRIMARY, identifier=n, display_name=n.title())
                for n in names
            )
        )

        report = verifier.quick_verify(manifest)

        assert report.passed == 4
        assert report.total == 5
        assert report.checks[-1].status is CheckStatus.FAILED

    def test_quick_checks_have_no_group(
        self, verifier: Verifier, sample_manifest: Manifest
    ) -> None:
        """Quick checks are not tied to a group."""
        report = verifier.quick_verify(sample_manifest)

        assert all(c.group is None for c in report.checks)
        assert report.total == 2
