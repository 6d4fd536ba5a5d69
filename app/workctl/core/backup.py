"""Backup archives taken before removals.

Archives are gzip-compressed tarballs named
``<group>_backup_<YYYYmmdd_HHMMSS_ffffff>.tar.gz``. Members are stored
relative to the user's home so an archive can be unpacked with
``tar -xzf ARCHIVE -C ~``.
"""

import logging
import os
import tarfile
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path

from workctl.core.errors import BackupError
from workctl.core.paths import ensure_backup_dir, expand_user_path
from workctl.models.history import BackupRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def _arcname(path: Path, home: Path) -> str:
    """Archive member name for a path, relative to home when possible."""
    try:
        return str(path.relative_to(home))
    except ValueError:
        # Not under home, keep the full structure
        return str(path).lstrip("/")


class BackupManager:
    """Creates backup archives of user paths.

    Attributes:
        backup_dir: Directory receiving the archives.
    """

    def __init__(self, backup_dir: Path | None = None, clock: Clock = utc_now) -> None:
        """Initialize BackupManager.

        Args:
            backup_dir: Archive directory. Default: ~/.local/state/workctl/backups
            clock: Source of the archive timestamp.
        """
        self._backup_dir = backup_dir
        self._clock = clock

    def create(self, group_name: str, paths: Sequence[str]) -> BackupRecord | None:
        """Archive the existing paths of a group.

        Args:
            group_name: Name used in the archive file name.
            paths: Paths to archive; ``~`` is expanded, missing ones are ignored.

        Returns:
            BackupRecord for the new archive, or None if no path exists.

        Raises:
            BackupError: If the archive cannot be written.
        """
        sources = [p for p in (expand_user_path(path) for path in paths) if p.exists()]
        if not sources:
            logger.info("No paths to back up for %s", group_name)
            return None

        created_at = self._clock()
        try:
            directory = ensure_backup_dir(self._backup_dir)
        except RuntimeError as e:
            raise BackupError(str(e)) from e

        archive = directory / f"{group_name}_backup_{created_at:%Y%m%d_%H%M%S_%f}.tar.gz"
        partial = archive.with_name(archive.name + ".partial")
        home = Path.home()

        logger.info("Backing up %s to %s", ", ".join(map(str, sources)), archive)
        try:
            with tarfile.open(partial, "w:gz") as tar:
                for source in sources:
                    self._add(tar, source, home)
            os.replace(partial, archive)
            size = archive.stat().st_size
        except (OSError, tarfile.TarError) as e:
            partial.unlink(missing_ok=True)
            msg = f"Could not write backup {archive}: {e}"
            raise BackupError(msg) from e

        logger.info("Backup created: %s (%d bytes)", archive, size)
        return BackupRecord(
            group_name=group_name,
            created_at=created_at,
            archive_path=archive,
            source_paths=frozenset(sources),
            size_bytes=size,
        )

    def _add(self, tar: tarfile.TarFile, source: Path, home: Path) -> None:
        """Add a file or tree; unreadable entries are logged and skipped."""
        if not source.is_dir() or source.is_symlink():
            self._add_entry(tar, source, home)
            return

        self._add_entry(tar, source, home)
        for root, dirs, files in os.walk(source):
            root_path = Path(root)
            for name in sorted(dirs) + sorted(files):
                self._add_entry(tar, root_path / name, home)
            dirs.sort()

    @staticmethod
    def _add_entry(tar: tarfile.TarFile, path: Path, home: Path) -> None:
        try:
            tar.add(path, arcname=_arcname(path, home), recursive=False)
        except PermissionError as e:
            logger.warning("Skipping unreadable path %s: %s", path, e)
