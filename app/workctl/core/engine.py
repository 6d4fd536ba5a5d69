"""Convergence engine.

Drives install groups toward a desired state one item at a time. Each
item is converged independently: a failing item is recorded and the
batch moves on, and critical items never abort a run. Removals are
always preceded by a backup of the group's user paths.
"""

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

from workctl.backends.base import BackendAdapter
from workctl.core.backup import BackupManager, Clock, utc_now
from workctl.core.confirm import ConfirmationProvider
from workctl.core.errors import BackendError, BackendUnavailableError, BackupError, UserAbortedError
from workctl.core.scaffold import Scaffolder
from workctl.core.state import StateStore
from workctl.models.action import (
    ArtifactResult,
    BatchResult,
    Direction,
    GroupResult,
    OperationResult,
    Outcome,
)
from workctl.models.manifest import Group, InstallItem, Manifest
from workctl.models.package import Backend

logger = logging.getLogger(__name__)

# Phrase the user must type before a complete removal
FULL_REMOVAL_PHRASE = "YES"

# Group name used for the whole-profile archive taken before a complete removal
FULL_BACKUP_NAME = "all"

ResultCallback = Callable[[OperationResult], None]


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded retry for transient backend failures.

    Attributes:
        attempts: Total attempts, including the first one.
        delay_seconds: Fixed pause between attempts.
    """

    attempts: int = 2
    delay_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            msg = f"attempts must be at least 1, got {self.attempts}"
            raise ValueError(msg)
        if self.delay_seconds < 0:
            msg = f"delay_seconds cannot be negative, got {self.delay_seconds}"
            raise ValueError(msg)


class ConvergenceEngine:
    """Applies and removes install groups.

    Attributes:
        dry_run: If True, report what would change without changing,
            recording or archiving anything.

    Example:
        >>> engine = ConvergenceEngine(get_backends(), StateStore(), BackupManager())
        >>> result = engine.converge(manifest.get_group("finance"), Direction.PRESENT)
        >>> print(result.success_count, "of", result.total_count)
    """

    def __init__(
        self,
        backends: Mapping[Backend, BackendAdapter],
        store: StateStore,
        backups: BackupManager,
        *,
        scaffolder: Scaffolder | None = None,
        retry: RetryPolicy | None = None,
        dry_run: bool = False,
        sleep: Callable[[float], None] = time.sleep,
        clock: Clock = utc_now,
        on_result: ResultCallback | None = None,
    ) -> None:
        self._backends = dict(backends)
        self._store = store
        self._backups = backups
        self._scaffolder = scaffolder or Scaffolder(dry_run=dry_run)
        self._retry = retry or RetryPolicy()
        self._dry_run = dry_run
        self._sleep = sleep
        self._clock = clock
        self._on_result = on_result

    @property
    def dry_run(self) -> bool:
        """Check if engine is in dry-run mode."""
        return self._dry_run

    def prepare(self, groups: Iterable[Group], *, refresh: bool = True) -> list[str]:
        """Get backends ready before installing groups.

        Refreshes the primary package index once and installs the
        secondary channel through the primary one when a selected group
        needs it and it is missing. Failures never stop the run; the
        affected items fail later on their own.

        Args:
            groups: Groups about to be installed.
            refresh: If False, skip the package index refresh.

        Returns:
            Human-readable warnings for anything that could not be prepared.
        """
        groups = list(groups)
        warnings: list[str] = []
        primary = self._backends.get(Backend.PRIMARY)

        if refresh and primary is not None and primary.is_available():
            try:
                primary.refresh()
            except BackendError as e:
                logger.warning("Package index refresh failed: %s", e)
                warnings.append(f"Package index refresh failed: {e}")

        for channel, adapter in self._backends.items():
            if channel is Backend.PRIMARY or adapter.is_available():
                continue
            if not any(group.uses_backend(channel) for group in groups):
                continue
            warning = self._bootstrap(adapter, primary)
            if warning:
                warnings.append(warning)

        return warnings

    def converge(
        self,
        group: Group,
        direction: Direction,
        *,
        remove_user_data: bool = False,
    ) -> GroupResult:
        """Drive every item and artifact of a group toward a direction.

        Before an ABSENT run the group's backup paths are archived. If
        the archive cannot be written, every item and artifact is
        reported SKIPPED and nothing is removed.

        Args:
            group: Group to converge.
            direction: PRESENT to install, ABSENT to remove.
            remove_user_data: On ABSENT, also delete user-data artifacts.

        Returns:
            GroupResult with one OperationResult per item, in group order.
        """
        logger.info("Converging group %s to %s", group.name, direction.value)
        backup = None

        if direction is Direction.ABSENT and not self._dry_run:
            try:
                backup = self._backups.create(group.name, group.backup_paths)
            except BackupError as e:
                logger.error("Backup for %s failed, skipping removal: %s", group.name, e)
                return self._skip_group(group, direction, "backup failed")
            if backup is not None:
                self._store.record_backup(backup)

        results = tuple(self._converge_item(item, direction) for item in group.items)
        artifacts = self._converge_artifacts(group, direction, remove_user_data)

        result = GroupResult(
            group_name=group.name,
            direction=direction,
            results=results,
            backup=backup,
            artifacts=artifacts,
        )
        logger.info(
            "Group %s: %d/%d succeeded, %d failed, %d skipped",
            group.name,
            result.success_count,
            result.total_count,
            result.failed_count,
            result.skipped_count,
        )
        return result

    def converge_many(
        self,
        groups: Iterable[Group],
        direction: Direction,
        *,
        remove_user_data: bool = False,
    ) -> BatchResult:
        """Converge several groups sequentially."""
        return BatchResult(
            groups=tuple(
                self.converge(group, direction, remove_user_data=remove_user_data)
                for group in groups
            )
        )

    def remove_everything(
        self,
        manifest: Manifest,
        confirm: ConfirmationProvider,
        *,
        remove_user_data: bool = True,
    ) -> BatchResult:
        """Remove every group after a two-step confirmation.

        Order: yes/no question, typed confirmation phrase, whole-profile
        backup, ABSENT convergence of each group,
        then a garbage-collection pass on every available backend.

        Args:
            manifest: Manifest whose groups are removed.
            confirm: Source of the two confirmations.
            remove_user_data: If False, keep workspace directories and templates.

        Returns:
            BatchResult with the full backup and the GC summary.

        Raises:
            UserAbortedError: If either confirmation is declined. Nothing
                has been changed or recorded at that point.
            BackupError: If the whole-profile backup cannot be written.
                Nothing has been removed at that point.
        """
        if not confirm.confirm(
            f"This will remove all {manifest.item_count} packages, shortcuts and "
            "workspace directories. Continue?"
        ):
            raise UserAbortedError("Complete removal cancelled")
        if not confirm.confirm_phrase("Are you ABSOLUTELY sure?", FULL_REMOVAL_PHRASE):
            raise UserAbortedError("Complete removal cancelled")

        logger.warning("Starting complete removal of %d groups", len(manifest.groups))

        backup = None
        if not self._dry_run:
            backup = self._backups.create(FULL_BACKUP_NAME, manifest.full_backup_paths)
            if backup is not None:
                self._store.record_backup(backup)

        batch = self.converge_many(
            manifest.groups, Direction.ABSENT, remove_user_data=remove_user_data
        )
        gc_detail = self._collect_garbage()

        return BatchResult(groups=batch.groups, backup=backup, gc_detail=gc_detail)

    def _converge_item(self, item: InstallItem, direction: Direction) -> OperationResult:
        if direction is Direction.ABSENT and not item.removable:
            return self._finish(item, direction, Outcome.SKIPPED, "retained on removal")

        backend = self._backends.get(item.backend)
        if backend is None:
            return self._unavailable(item, direction, f"no {item.backend.label} backend")

        try:
            installed = backend.is_installed(item.identifier)
        except BackendUnavailableError as e:
            return self._unavailable(item, direction, str(e))
        except BackendError as e:
            return self._finish(item, direction, Outcome.FAILED, str(e))

        if installed == (direction is Direction.PRESENT):
            return self._finish(item, direction, Outcome.ALREADY_SATISFIED, "")

        if self._dry_run:
            return self._finish(
                item, direction, Outcome.SKIPPED, f"dry-run: would {direction.verb}"
            )

        outcome, detail = self._apply_with_retry(backend, item, direction)
        return self._finish(item, direction, outcome, detail)

    def _apply_with_retry(
        self,
        backend: BackendAdapter,
        item: InstallItem,
        direction: Direction,
    ) -> tuple[Outcome, str]:
        """Run install/remove, retrying transient failures.

        Only the final attempt determines the outcome.
        """
        attempts = self._retry.attempts
        for attempt in range(1, attempts + 1):
            try:
                if direction is Direction.PRESENT:
                    outcome = backend.install(item.identifier, item.install_args)
                else:
                    outcome = backend.remove(item.identifier)
            except BackendUnavailableError as e:
                unavailable = Outcome.FAILED if direction is Direction.PRESENT else Outcome.SKIPPED
                return unavailable, str(e)
            except BackendError as e:
                if e.detail:
                    logger.debug("%s output:\n%s", item.identifier, e.detail)
                if not e.transient or attempt == attempts:
                    logger.error(
                        "Failed to %s %s after %d attempt(s): %s",
                        direction.verb,
                        item.identifier,
                        attempt,
                        e,
                    )
                    return Outcome.FAILED, str(e)
                logger.warning(
                    "Attempt %d/%d to %s %s failed (%s), retrying in %.1fs",
                    attempt,
                    attempts,
                    direction.verb,
                    item.identifier,
                    e,
                    self._retry.delay_seconds,
                )
                self._sleep(self._retry.delay_seconds)
            else:
                verb = "installed" if direction is Direction.PRESENT else "removed"
                return outcome, f"{verb} via {item.backend.label}"

        # Unreachable: the loop returns on the last attempt
        return Outcome.FAILED, "no attempts made"

    def _unavailable(self, item: InstallItem, direction: Direction, detail: str) -> OperationResult:
        outcome = Outcome.FAILED if direction is Direction.PRESENT else Outcome.SKIPPED
        logger.warning("%s unavailable for %s: %s", item.backend.label, item.identifier, detail)
        return self._finish(item, direction, outcome, detail)

    def _finish(
        self,
        item: InstallItem,
        direction: Direction,
        outcome: Outcome,
        detail: str,
    ) -> OperationResult:
        result = OperationResult(
            item=item,
            direction=direction,
            outcome=outcome,
            timestamp=self._clock(),
            detail=detail,
        )
        if not self._dry_run:
            try:
                self._store.record(result)
            except OSError as e:
                logger.error("Could not record %s in history: %s", item.identifier, e)
        logger.info(
            "%s %s:%s -> %s %s",
            direction.verb,
            item.backend.label,
            item.identifier,
            outcome.value,
            detail,
        )
        if self._on_result is not None:
            self._on_result(result)
        return result

    def _converge_artifacts(
        self,
        group: Group,
        direction: Direction,
        remove_user_data: bool,
    ) -> tuple[ArtifactResult, ...]:
        if direction is Direction.PRESENT:
            return tuple(self._scaffolder.create(a) for a in group.artifacts)

        # Children before parents
        results: list[ArtifactResult] = []
        for artifact in reversed(group.artifacts):
            if artifact.user_data and not remove_user_data:
                results.append(ArtifactResult(artifact, Outcome.SKIPPED, "kept user data"))
            else:
                results.append(self._scaffolder.remove(artifact))
        results.reverse()
        return tuple(results)

    def _skip_group(self, group: Group, direction: Direction, detail: str) -> GroupResult:
        results = tuple(
            self._finish(item, direction, Outcome.SKIPPED, detail) for item in group.items
        )
        artifacts = tuple(ArtifactResult(a, Outcome.SKIPPED, detail) for a in group.artifacts)
        return GroupResult(
            group_name=group.name,
            direction=direction,
            results=results,
            artifacts=artifacts,
        )

    def _bootstrap(self, adapter: BackendAdapter, primary: BackendAdapter | None) -> str | None:
        """Install a missing secondary channel through the primary one.

        Returns:
            A warning message, or None on success.
        """
        package = adapter.bootstrap_package
        label = adapter.backend.label
        if package is None or primary is None or not primary.is_available():
            logger.warning("%s is not available and cannot be bootstrapped", label)
            return f"{label} is not available; its items will fail"

        if self._dry_run:
            logger.info("Dry-run: would install %s to provide %s", package, label)
            return None

        logger.info("Installing %s to provide %s", package, label)
        try:
            primary.install(package)
        except (BackendError, BackendUnavailableError) as e:
            logger.error("Could not install %s: %s", package, e)
            return f"Could not install {package}: {e}"

        try:
            adapter.activate()
        except (BackendError, BackendUnavailableError) as e:
            logger.warning("Could not activate %s: %s", label, e)
        if not adapter.is_available():
            return f"{package} was installed but {label} is still not on PATH"
        return None

    def _collect_garbage(self) -> str:
        """Run the GC pass on every available backend. Failures are logged only."""
        if self._dry_run:
            return "dry-run: garbage collection skipped"

        details: list[str] = []
        for adapter in self._backends.values():
            if not adapter.is_available():
                continue
            try:
                details.append(adapter.collect_garbage())
            except (BackendError, BackendUnavailableError) as e:
                logger.warning("Garbage collection on %s failed: %s", adapter.backend.label, e)
                details.append(f"{adapter.backend.label}: failed ({e})")
        return "; ".join(details)
