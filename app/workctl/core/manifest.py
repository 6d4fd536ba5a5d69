"""Manifest file I/O operations.

This module provides functions for loading and saving manifest files
in TOML format with validation using Pydantic models. When no user
manifest exists, the built-in catalog is used.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import tomli_w
from pydantic import ValidationError

from workctl.catalog import default_manifest
from workctl.core.paths import get_manifest_path
from workctl.models.manifest import Group, InstallItem, Manifest


class ManifestError(Exception):
    """Base exception for manifest-related errors."""


class ManifestNotFoundError(ManifestError):
    """Raised when manifest file is not found."""


class ManifestParseError(ManifestError):
    """Raised when manifest file cannot be parsed."""


class ManifestValidationError(ManifestError):
    """Raised when manifest content is invalid."""


def load_manifest(path: Path | None = None) -> Manifest:
    """Load and validate a manifest from a TOML file.

    Args:
        path: Path to the manifest file. If None, uses default manifest path.

    Returns:
        Validated Manifest object.

    Raises:
        ManifestNotFoundError: If the manifest file doesn't exist.
        ManifestParseError: If the TOML syntax is invalid.
        ManifestValidationError: If the content doesn't match the schema.
    """
    manifest_path = path or get_manifest_path()

    if not manifest_path.exists():
        raise ManifestNotFoundError(f"Manifest not found: {manifest_path}")

    try:
        with open(manifest_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ManifestError(f"Failed to read manifest: {e}") from e

    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        raise ManifestValidationError(f"Invalid manifest content: {e}") from e


def save_manifest(manifest: Manifest, path: Path | None = None) -> Path:
    """Save a manifest to a TOML file.

    The file is written atomically through a temporary file in the same
    directory. The temporary file is cleaned up on failure.

    Args:
        manifest: The Manifest object to save.
        path: Path to save the manifest. If None, uses default manifest path.

    Returns:
        Path where the manifest was saved.

    Raises:
        ManifestError: If the file cannot be written.
    """
    manifest_path = path or get_manifest_path()
    manifest_path.parent.mkdir(parents=True, exist_ok=True)

    data = _manifest_to_dict(manifest)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=manifest_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(manifest_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ManifestError(f"Failed to write manifest: {e}") from e

    return manifest_path


def resolve_manifest(path: Path | None = None) -> Manifest:
    """Load the user manifest if one exists, else the built-in catalog.

    An explicit ``path`` must exist.

    Raises:
        ManifestError: If the manifest cannot be loaded.
    """
    if path is None and not get_manifest_path().exists():
        return default_manifest()
    return load_manifest(path)


def require_manifest(manifest_path: Path | None = None) -> Manifest:
    """Resolve the manifest or exit with a helpful error message.

    Args:
        manifest_path: Optional custom manifest path.

    Returns:
        Loaded and validated Manifest.

    Raises:
        typer.Exit: If manifest cannot be loaded.
    """
    import typer

    from workctl.utils.formatting import print_error, print_info

    try:
        return resolve_manifest(manifest_path)
    except ManifestNotFoundError as e:
        print_error(str(e))
        print_info("Run 'workctl config init --manifest' to write the built-in catalog.")
        raise typer.Exit(code=1) from e
    except ManifestError as e:
        print_error(f"Failed to load manifest: {e}")
        raise typer.Exit(code=1) from e


def _manifest_to_dict(manifest: Manifest) -> dict[str, Any]:
    """Convert a Manifest to a dictionary suitable for TOML serialization.

    Empty optional collections and default-valued flags are left out.
    """
    data: dict[str, Any] = {"groups": [_group_to_dict(g) for g in manifest.groups]}
    if manifest.quick_checks:
        data["quick_checks"] = [_item_to_dict(i) for i in manifest.quick_checks]
    if manifest.full_backup_paths:
        data["full_backup_paths"] = list(manifest.full_backup_paths)
    return data


def _group_to_dict(group: Group) -> dict[str, Any]:
    result: dict[str, Any] = {"name": group.name, "title": group.title}
    if group.backup_paths:
        result["backup_paths"] = list(group.backup_paths)
    if group.items:
        result["items"] = [_item_to_dict(i) for i in group.items]
    if group.artifacts:
        result["artifacts"] = [
            a.model_dump(mode="json", exclude_defaults=True) | {"kind": a.kind}
            for a in group.artifacts
        ]
    return result


def _item_to_dict(item: InstallItem) -> dict[str, Any]:
    result: dict[str, Any] = {
        "backend": item.backend.label,
        "identifier": item.identifier,
        "display_name": item.display_name,
    }
    if not item.critical:
        result["critical"] = False
    if item.install_args:
        result["install_args"] = list(item.install_args)
    if not item.removable:
        result["removable"] = False
    return result
