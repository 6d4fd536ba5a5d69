"""Shared plumbing for the mutating and reporting commands.

Loads settings, resolves group selections, builds the convergence
engine from configuration, and turns interrupts into a clean exit.
"""

import contextlib
import logging
import signal
from collections.abc import Iterator, Sequence
from enum import IntEnum
from types import FrameType

import typer

from workctl.backends import get_backends
from workctl.core.backup import BackupManager
from workctl.core.config import ConfigError, WorkctlConfig, load_config
from workctl.core.engine import ConvergenceEngine, ResultCallback, RetryPolicy
from workctl.core.errors import PreconditionError
from workctl.core.lock import instance_lock
from workctl.core.preflight import check_host
from workctl.core.state import StateStore
from workctl.models.manifest import Group, Manifest
from workctl.utils.formatting import err_console, print_error, print_info

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    ERROR = 1
    USAGE = 2
    PARTIAL = 3
    INTERRUPTED = 130


def exit_with(code: ExitCode) -> typer.Exit:
    """Build a typer.Exit for an exit code."""
    return typer.Exit(code=int(code))


def require_config() -> WorkctlConfig:
    """Load the configuration or exit with an error message."""
    try:
        return load_config()
    except ConfigError as e:
        print_error(str(e))
        print_info("Fix or delete the file, or run 'workctl config init --force'.")
        raise exit_with(ExitCode.ERROR) from e


def require_host() -> None:
    """Run host preflight checks or exit with an error message."""
    try:
        check_host()
    except PreconditionError as e:
        logger.error("Preflight failed: %s", e)
        print_error(str(e))
        raise exit_with(ExitCode.ERROR) from e


def select_groups(
    manifest: Manifest,
    names: Sequence[str] | None,
    select_all: bool,
) -> list[Group]:
    """Resolve the ``--group``/``--all`` selection.

    Groups keep the order they were given on the command line, and a
    group named twice is converged once.

    Raises:
        typer.BadParameter: If neither or both selectors are given, or a
            group name is unknown.
    """
    names = list(names or [])
    if select_all and names:
        raise typer.BadParameter("Use either --all or --group, not both.")
    if select_all:
        return list(manifest.groups)
    if not names:
        raise typer.BadParameter("Select groups with --group NAME or use --all.")

    selected: list[Group] = []
    for name in dict.fromkeys(names):
        try:
            selected.append(manifest.get_group(name))
        except KeyError:
            available = ", ".join(manifest.group_names)
            raise typer.BadParameter(f"Unknown group '{name}'. Available: {available}") from None
    return selected


def build_engine(
    config: WorkctlConfig,
    store: StateStore,
    *,
    dry_run: bool,
    on_result: ResultCallback | None = None,
) -> ConvergenceEngine:
    """Create an engine wired to the configured backends and backup directory."""
    backends = get_backends(
        dry_run=dry_run,
        timeout=float(config.command_timeout_seconds),
        purge=config.purge_on_remove,
    )
    return ConvergenceEngine(
        backends,
        store,
        BackupManager(config.effective_backup_dir),
        retry=RetryPolicy(config.retry_attempts, config.retry_delay_seconds),
        dry_run=dry_run,
        on_result=on_result,
    )


@contextlib.contextmanager
def run_lock(config: WorkctlConfig, dry_run: bool) -> Iterator[None]:
    """Hold the single-instance lock for a mutating run.

    Dry runs and configurations with ``single_instance = false`` run
    without the lock.
    """
    with contextlib.ExitStack() as stack:
        if not dry_run and config.single_instance:
            try:
                stack.enter_context(instance_lock())
            except PreconditionError as e:
                print_error(str(e))
                raise exit_with(ExitCode.ERROR) from e
        yield


def _raise_interrupt(signum: int, frame: FrameType | None) -> None:
    raise KeyboardInterrupt


@contextlib.contextmanager
def interruptible(store: StateStore) -> Iterator[None]:
    """Turn Ctrl+C and SIGTERM into a clean exit with code 130.

    Outcomes already recorded stay in the history; the store is flushed
    and closed before exiting.
    """
    previous = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        yield
    except KeyboardInterrupt:
        store.close()
        logger.warning("Interrupted; results recorded so far were kept")
        err_console.print("\n[warning]Interrupted.[/] Results recorded so far were kept.")
        raise exit_with(ExitCode.INTERRUPTED) from None
    finally:
        signal.signal(signal.SIGTERM, previous)
