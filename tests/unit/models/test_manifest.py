"""Unit tests for manifest models.

Tests for InstallItem, Artifact, Group and Manifest validation.
"""

import pytest
from pydantic import ValidationError
from workctl.models.manifest import Artifact, Group, InstallItem, Manifest
from workctl.models.package import Backend


class TestInstallItem:
    """Tests for InstallItem model."""

    def test_defaults(self) -> None:
        """Items are critical and removable with no extra args by default."""
        item = InstallItem(backend=Backend.PRIMARY, identifier="vim", display_name="Vim")

        assert item.critical is True
        assert item.removable is True
        assert item.install_args == ()

    @pytest.mark.parametrize(
        ("alias", "expected"),
        [("apt", Backend.PRIMARY), ("snap", Backend.SECONDARY), ("SNAP", Backend.SECONDARY)],
    )
    def test_backend_aliases(self, alias: str, expected: Backend) -> None:
        """Tool names are accepted for the backend field."""
        item = InstallItem.model_validate(
            {"backend": alias, "identifier": "x", "display_name": "X"}
        )
        assert item.backend is expected

    def test_role_names_accepted(self) -> None:
        """Role names are accepted as-is."""
        item = InstallItem.model_validate(
            {"backend": "secondary", "identifier": "code", "display_name": "Code"}
        )
        assert item.backend is Backend.SECONDARY

    def test_unknown_backend_rejected(self) -> None:
        """Unknown channels fail validation."""
        with pytest.raises(ValidationError):
            InstallItem.model_validate(
                {"backend": "flatpak", "identifier": "x", "display_name": "X"}
            )

    def test_empty_identifier_rejected(self) -> None:
        """Identifiers cannot be empty."""
        with pytest.raises(ValidationError):
            InstallItem(backend=Backend.PRIMARY, identifier="", display_name="X")

    def test_extra_fields_rejected(self) -> None:
        """Unknown keys are rejected."""
        with pytest.raises(ValidationError):
            InstallItem.model_validate(
                {"backend": "apt", "identifier": "x", "display_name": "X", "version": "1"}
            )

    def test_key_is_backend_and_identifier(self, apt_item: InstallItem) -> None:
        """Identity is the (backend, identifier) pair."""
        assert apt_item.key == (Backend.PRIMARY, "gnucash")


class TestArtifact:
    """Tests for Artifact model."""

    def test_directory_with_content_rejected(self) -> None:
        """Directories carry no content."""
        with pytest.raises(ValidationError, match="cannot have content"):
            Artifact(path="~/Workspace", display_name="W", kind="directory", content="x")

    def test_shortcut_requires_content(self) -> None:
        """Shortcuts without a body are rejected."""
        with pytest.raises(ValidationError, match="requires content"):
            Artifact(path="~/Desktop/a.desktop", display_name="A", kind="shortcut")

    def test_unknown_kind_rejected(self) -> None:
        """Only directory, file and shortcut are valid kinds."""
        with pytest.raises(ValidationError):
            Artifact.model_validate({"path": "~/x", "display_name": "X", "kind": "symlink"})

    def test_file_defaults(self) -> None:
        """Files default to critical, non-user-data."""
        artifact = Artifact(path="~/notes.md", display_name="Notes", content="# Notes\n")
        assert artifact.kind == "file"
        assert artifact.critical is True
        assert artifact.user_data is False


class TestGroup:
    """Tests for Group model."""

    def test_duplicate_items_rejected(self) -> None:
        """The same backend/identifier pair cannot appear twice."""
        item = InstallItem(backend=Backend.PRIMARY, identifier="vim", display_name="Vim")
        with pytest.raises(ValidationError, match="Duplicate item apt:vim"):
            Group(name="editors", title="Editors", items=(item, item))

    def test_same_identifier_on_two_backends_allowed(self) -> None:
        """Identity includes the backend."""
        group = Group(
            name="editors",
            title="Editors",
            items=(
                InstallItem(backend=Backend.PRIMARY, identifier="code", display_name="A"),
                InstallItem(backend=Backend.SECONDARY, identifier="code", display_name="B"),
            ),
        )
        assert len(group.items) == 2

    @pytest.mark.parametrize("name", ["Finance", "-finance", "fin ance", ""])
    def test_invalid_names_rejected(self, name: str) -> None:
        """Group names are lowercase slugs."""
        with pytest.raises(ValidationError):
            Group(name=name, title="T")

    def test_has_user_data(self, workspace_group: Group, finance_group: Group) -> None:
        """has_user_data reflects user-data artifacts."""
        assert workspace_group.has_user_data is True
        assert finance_group.has_user_data is False

    def test_uses_backend(self, dev_group: Group, finance_group: Group) -> None:
        """uses_backend checks item channels."""
        assert dev_group.uses_backend(Backend.SECONDARY) is True
        assert finance_group.uses_backend(Backend.SECONDARY) is False


class TestManifest:
    """Tests for Manifest model."""

    def test_group_names_in_order(self, sample_manifest: Manifest) -> None:
        """group_names keeps manifest order."""
        assert sample_manifest.group_names == ["finance", "dev-tools", "workspace"]

    def test_get_group(self, sample_manifest: Manifest) -> None:
        """get_group returns the named group."""
        assert sample_manifest.get_group("dev-tools").title == "Development Tools"

    def test_get_group_unknown_raises(self, sample_manifest: Manifest) -> None:
        """get_group raises KeyError for unknown names."""
        with pytest.raises(KeyError):
            sample_manifest.get_group("games")

    def test_find_item(self, sample_manifest: Manifest) -> None:
        """find_item returns the group and item."""
        found = sample_manifest.find_item("code")
        assert found is not None
        group, item = found
        assert group.name == "dev-tools"
        assert item.backend is Backend.SECONDARY

    def test_find_item_missing(self, sample_manifest: Manifest) -> None:
        """find_item returns None for unknown identifiers."""
        assert sample_manifest.find_item("steam") is None

    def test_item_count(self, sample_manifest: Manifest) -> None:
        """item_count sums items across groups."""
        assert sample_manifest.item_count == 5

    def test_duplicate_group_names_rejected(self, finance_group: Group) -> None:
        """Group names are unique."""
        with pytest.raises(ValidationError, match="Duplicate group names"):
            Manifest(groups=(finance_group, finance_group))
