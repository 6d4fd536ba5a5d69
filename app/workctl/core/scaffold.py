"""Filesystem scaffolding owned by install groups.

Creates and removes the workspace directories, templates and desktop
shortcuts declared as artifacts in the manifest. Removal is restricted
to paths inside the user's home directory.
"""

from __future__ import annotations

import logging
import shutil
import stat
from collections.abc import Callable
from datetime import date
from pathlib import Path

from workctl.core.paths import expand_user_path
from workctl.models.action import ArtifactResult, Outcome
from workctl.models.manifest import Artifact

logger = logging.getLogger(__name__)

# Paths that are never removed, even when listed in a manifest
CRITICAL_ROOTS: frozenset[Path] = frozenset(
    Path(p) for p in ("/", "/home", "/etc", "/usr", "/var")
)

_EXECUTABLE = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def is_executable(path: Path) -> bool:
    """Check if a file has any execute bit set."""
    return bool(path.stat().st_mode & _EXECUTABLE)


def is_safe_to_remove(path: Path, home: Path | None = None) -> bool:
    """Check if a path may be deleted by workctl.

    Args:
        path: Absolute path to check.
        home: Home directory. Defaults to the current user's.

    Returns:
        True if the path is strictly inside home and not a critical root.
    """
    home = (home or Path.home()).resolve()
    resolved = path.resolve()
    if resolved in CRITICAL_ROOTS or resolved == home:
        return False
    return resolved.is_relative_to(home)


def resolve_artifact_path(artifact: Artifact, home: Path | None = None) -> Path:
    """Absolute target path of an artifact.

    Args:
        artifact: Artifact whose path may start with ``~``.
        home: Home directory replacing ``~``. Defaults to the user's.
    """
    if home is not None and artifact.path.startswith("~"):
        return home / artifact.path.removeprefix("~").lstrip("/")
    return expand_user_path(artifact.path)


def render_content(content: str, home: Path, today: date) -> str:
    """Substitute ``{home}`` and ``{date}`` placeholders.

    Other braces are left untouched.
    """
    return content.replace("{home}", str(home)).replace("{date}", today.isoformat())


class Scaffolder:
    """Creates and removes group artifacts.

    Existing files are never overwritten; a template the user has edited
    counts as already satisfied.

    Attributes:
        dry_run: If True, report what would change without touching disk.
    """

    def __init__(
        self,
        dry_run: bool = False,
        home: Path | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._dry_run = dry_run
        self._home = home
        self._today = today

    @property
    def dry_run(self) -> bool:
        """Check if scaffolder is in dry-run mode."""
        return self._dry_run

    @property
    def home(self) -> Path:
        """Home directory used for placeholders and the removal guard."""
        return self._home or Path.home()

    def resolve(self, artifact: Artifact) -> Path:
        """Absolute target path of an artifact."""
        return resolve_artifact_path(artifact, self._home)

    def create(self, artifact: Artifact) -> ArtifactResult:
        """Create an artifact if it doesn't exist yet."""
        path = self.resolve(artifact)

        if path.exists():
            if artifact.kind == "shortcut" and not is_executable(path):
                return self._make_executable(artifact, path)
            return ArtifactResult(artifact, Outcome.ALREADY_SATISFIED, str(path))

        if self._dry_run:
            return ArtifactResult(artifact, Outcome.SKIPPED, f"dry-run: would create {path}")

        try:
            if artifact.kind == "directory":
                path.mkdir(parents=True, exist_ok=True)
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(
                    render_content(artifact.content or "", self.home, self._today()),
                    encoding="utf-8",
                )
                if artifact.kind == "shortcut":
                    path.chmod(path.stat().st_mode | _EXECUTABLE)
        except OSError as e:
            logger.warning("Could not create %s: %s", path, e)
            return ArtifactResult(artifact, Outcome.FAILED, str(e))

        logger.info("Created %s %s", artifact.kind, path)
        return ArtifactResult(artifact, Outcome.APPLIED, str(path))

    def remove(self, artifact: Artifact) -> ArtifactResult:
        """Remove an artifact inside the home directory."""
        path = self.resolve(artifact)

        if not path.exists() and not path.is_symlink():
            return ArtifactResult(artifact, Outcome.ALREADY_SATISFIED, str(path))

        if not is_safe_to_remove(path, self.home):
            logger.error("Refusing to remove %s: outside home or critical directory", path)
            return ArtifactResult(artifact, Outcome.FAILED, f"refusing to remove {path}")

        if self._dry_run:
            return ArtifactResult(artifact, Outcome.SKIPPED, f"dry-run: would remove {path}")

        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)
            return ArtifactResult(artifact, Outcome.FAILED, str(e))

        logger.info("Removed %s %s", artifact.kind, path)
        return ArtifactResult(artifact, Outcome.APPLIED, str(path))

    def _make_executable(self, artifact: Artifact, path: Path) -> ArtifactResult:
        if self._dry_run:
            return ArtifactResult(
                artifact, Outcome.SKIPPED, f"dry-run: would make {path} executable"
            )
        try:
            path.chmod(path.stat().st_mode | _EXECUTABLE)
        except OSError as e:
            logger.warning("Could not chmod %s: %s", path, e)
            return ArtifactResult(artifact, Outcome.FAILED, str(e))
        logger.info("Made %s executable", path)
        return ArtifactResult(artifact, Outcome.APPLIED, str(path))
