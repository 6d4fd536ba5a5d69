"""Abstract base class for installation backends.

This module defines the BackendAdapter interface that the APT and Snap
adapters implement. Adapters work on one identifier at a time; the
convergence engine owns batching, retries and bookkeeping.
"""

import logging
import subprocess
from abc import ABC, abstractmethod

from workctl.core.errors import BackendError, BackendUnavailableError
from workctl.models.action import Outcome
from workctl.models.package import Backend
from workctl.utils.shell import CommandResult, run_command

logger = logging.getLogger(__name__)


class BackendAdapter(ABC):
    """Abstract base class for all installation backends.

    Install and remove are idempotent: asking for a state that already
    holds returns ``Outcome.ALREADY_SATISFIED`` without running the
    package manager.

    Attributes:
        dry_run: If True, mutating commands are simulated or skipped.
        timeout: Maximum seconds a single package manager call may take.

    Example:
        >>> backend = AptBackend(dry_run=True)
        >>> if backend.is_available():
        ...     outcome = backend.install("gnucash")
    """

    # Package that provides this backend through the primary channel
    bootstrap_package: str | None = None

    def __init__(self, dry_run: bool = False, timeout: float = 900.0) -> None:
        """Initialize the backend.

        Args:
            dry_run: If True, only simulate mutating commands.
            timeout: Timeout in seconds for install/remove commands.
        """
        self._dry_run = dry_run
        self._timeout = timeout

    @property
    def dry_run(self) -> bool:
        """Check if backend is in dry-run mode."""
        return self._dry_run

    @property
    def timeout(self) -> float:
        """Timeout applied to mutating commands."""
        return self._timeout

    @property
    @abstractmethod
    def backend(self) -> Backend:
        """Return the channel this adapter handles."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the backend's tools are on PATH."""

    @abstractmethod
    def is_installed(self, identifier: str) -> bool:
        """Query whether a package is currently installed.

        Raises:
            BackendUnavailableError: If the query tool is missing.
        """

    @abstractmethod
    def _install(self, identifier: str, extra_args: tuple[str, ...]) -> None:
        """Run the install command for a package known to be absent.

        Raises:
            BackendError: If the command fails.
        """

    @abstractmethod
    def _remove(self, identifier: str) -> None:
        """Run the remove command for a package known to be present.

        Raises:
            BackendError: If the command fails.
        """

    def install(self, identifier: str, extra_args: tuple[str, ...] = ()) -> Outcome:
        """Install a package if it is not installed yet.

        Args:
            identifier: Package name.
            extra_args: Extra install flags (e.g. ``--classic``).

        Returns:
            APPLIED or ALREADY_SATISFIED.

        Raises:
            BackendUnavailableError: If the backend tools are missing.
            BackendError: If the install command fails.
        """
        self._require_available()
        if self.is_installed(identifier):
            logger.debug("%s %s already installed", self.backend.label, identifier)
            return Outcome.ALREADY_SATISFIED
        self._install(identifier, extra_args)
        return Outcome.APPLIED

    def remove(self, identifier: str) -> Outcome:
        """Remove a package if it is installed.

        Args:
            identifier: Package name.

        Returns:
            APPLIED or ALREADY_SATISFIED.

        Raises:
            BackendUnavailableError: If the backend tools are missing.
            BackendError: If the remove command fails.
        """
        self._require_available()
        if not self.is_installed(identifier):
            logger.debug("%s %s already absent", self.backend.label, identifier)
            return Outcome.ALREADY_SATISFIED
        self._remove(identifier)
        return Outcome.APPLIED

    def refresh(self) -> None:
        """Refresh the package index. No-op unless overridden."""

    def collect_garbage(self) -> str:
        """Remove packages nothing depends on any more.

        Returns:
            Short summary of what was done.
        """
        return f"{self.backend.label}: nothing to collect"

    def activate(self) -> None:
        """Start services the backend needs after bootstrapping. No-op by default."""

    def _require_available(self) -> None:
        if not self.is_available():
            msg = f"{self.backend.label} is not available on this system"
            raise BackendUnavailableError(msg)

    def _run(self, args: list[str], *, timeout: float | None = None) -> CommandResult:
        """Run a backend command, mapping process errors to backend errors.

        Args:
            args: Command and arguments.
            timeout: Override for the adapter timeout.

        Returns:
            CommandResult (may be unsuccessful).

        Raises:
            BackendUnavailableError: If the executable cannot be found.
            BackendError: If the command times out.
        """
        logger.debug("Running: %s", " ".join(args))
        try:
            result = run_command(args, timeout=timeout or self._timeout)
        except FileNotFoundError as e:
            msg = f"{args[0]} not found"
            raise BackendUnavailableError(msg) from e
        except subprocess.TimeoutExpired as e:
            msg = f"{' '.join(args[:3])} timed out after {e.timeout:.0f}s"
            raise BackendError(msg) from e
        if result.output:
            logger.debug("Output of %s (exit %d):\n%s", args[0], result.returncode, result.output)
        return result
