"""Manifest models describing the declared workstation state.

A manifest is an ordered set of install groups. Each group names the
packages it delivers (InstallItem), the filesystem scaffolding it owns
(Artifact) and the user paths archived before it is removed.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from workctl.models.package import Backend

# Manifest files may name channels by tool instead of role
_BACKEND_ALIASES: dict[str, str] = {
    "apt": Backend.PRIMARY.value,
    "snap": Backend.SECONDARY.value,
}

ArtifactKind = Literal["directory", "file", "shortcut"]


class InstallItem(BaseModel):
    """A single package delivered through one backend.

    Identity is the (backend, identifier) pair.

    Attributes:
        backend: Channel that installs this item.
        identifier: Package name understood by the backend.
        display_name: Human-readable name for output.
        critical: Missing critical items fail verification; others warn.
        install_args: Extra arguments passed on install (e.g. ``--classic``).
        removable: If False, the item is installed but never removed.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    backend: Annotated[Backend, Field(description="Installation channel")]
    identifier: Annotated[str, Field(min_length=1, description="Package name")]
    display_name: Annotated[str, Field(min_length=1, description="Human-readable name")]
    critical: Annotated[bool, Field(description="Verification failure if missing")] = True
    install_args: Annotated[
        tuple[str, ...],
        Field(description="Extra install arguments"),
    ] = ()
    removable: Annotated[bool, Field(description="Removed on uninstall")] = True

    @field_validator("backend", mode="before")
    @classmethod
    def resolve_backend_alias(cls, v: object) -> object:
        """Accept ``apt``/``snap`` as aliases for primary/secondary."""
        if isinstance(v, str):
            return _BACKEND_ALIASES.get(v.lower(), v.lower())
        return v

    @property
    def key(self) -> tuple[Backend, str]:
        """Identity of the item."""
        return (self.backend, self.identifier)


class Artifact(BaseModel):
    """Filesystem scaffolding owned by a group.

    Attributes:
        path: Target path; ``~`` expands to the user's home.
        display_name: Human-readable name for output.
        kind: directory, plain file, or executable desktop shortcut.
        content: File body for file/shortcut kinds. ``{home}`` and
            ``{date}`` are substituted when written.
        critical: Missing critical artifacts fail verification.
        user_data: Holds user work; removed only after explicit confirmation.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: Annotated[str, Field(min_length=1, description="Target path")]
    display_name: Annotated[str, Field(min_length=1, description="Human-readable name")]
    kind: Annotated[ArtifactKind, Field(description="Artifact type")] = "file"
    content: Annotated[str | None, Field(description="File body")] = None
    critical: Annotated[bool, Field(description="Verification failure if missing")] = True
    user_data: Annotated[bool, Field(description="Contains user work")] = False

    @model_validator(mode="after")
    def validate_content(self) -> Artifact:
        """Directories carry no content; shortcuts must have one."""
        if self.kind == "directory" and self.content is not None:
            msg = f"Directory artifact {self.path} cannot have content"
            raise ValueError(msg)
        if self.kind == "shortcut" and not self.content:
            msg = f"Shortcut artifact {self.path} requires content"
            raise ValueError(msg)
        return self


class Group(BaseModel):
    """A named, ordered set of install items.

    Item order is kept for deterministic output only; items are
    applied and removed independently of each other.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: Annotated[
        str,
        Field(pattern=r"^[a-z0-9][a-z0-9-]*$", description="Group identifier"),
    ]
    title: Annotated[str, Field(min_length=1, description="Display title")]
    items: Annotated[tuple[InstallItem, ...], Field(description="Packages")] = ()
    artifacts: Annotated[tuple[Artifact, ...], Field(description="Scaffolding")] = ()
    backup_paths: Annotated[
        tuple[str, ...],
        Field(description="Paths archived before removal"),
    ] = ()

    @model_validator(mode="after")
    def validate_unique_items(self) -> Group:
        """Reject duplicate (backend, identifier) pairs within a group."""
        seen: set[tuple[Backend, str]] = set()
        for item in self.items:
            if item.key in seen:
                msg = (
                    f"Duplicate item {item.backend.label}:{item.identifier} "
                    f"in group '{self.name}'"
                )
                raise ValueError(msg)
            seen.add(item.key)
        return self

    @property
    def has_user_data(self) -> bool:
        """Whether any artifact of this group holds user work."""
        return any(artifact.user_data for artifact in self.artifacts)

    def uses_backend(self, backend: Backend) -> bool:
        """Check if any item of this group is delivered through a backend."""
        return any(item.backend == backend for item in self.items)


class Manifest(BaseModel):
    """The complete declared workstation state.

    Attributes:
        groups: Install groups in catalog order.
        quick_checks: Small fixed set of critical items for fast verification.
        full_backup_paths: Paths archived once before a full removal.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    groups: Annotated[tuple[Group, ...], Field(description="Install groups")] = ()
    quick_checks: Annotated[
        tuple[InstallItem, ...],
        Field(description="Items checked by quick verification"),
    ] = ()
    full_backup_paths: Annotated[
        tuple[str, ...],
        Field(description="Paths archived before full removal"),
    ] = ()

    @model_validator(mode="after")
    def validate_unique_groups(self) -> Manifest:
        """Reject duplicate group names."""
        names = [group.name for group in self.groups]
        duplicates = {name for name in names if names.count(name) > 1}
        if duplicates:
            msg = f"Duplicate group names: {sorted(duplicates)}"
            raise ValueError(msg)
        return self

    @property
    def group_names(self) -> list[str]:
        """Names of all groups, in manifest order."""
        return [group.name for group in self.groups]

    def get_group(self, name: str) -> Group:
        """Look up a group by name.

        Raises:
            KeyError: If no group has this name.
        """
        for group in self.groups:
            if group.name == name:
                return group
        raise KeyError(name)

    def find_item(self, identifier: str) -> tuple[Group, InstallItem] | None:
        """Find the first item with a given identifier across all groups."""
        for group in self.groups:
            for item in group.items:
                if item.identifier == identifier:
                    return group, item
        return None

    @property
    def item_count(self) -> int:
        """Total number of install items across groups."""
        return sum(len(group.items) for group in self.groups)
