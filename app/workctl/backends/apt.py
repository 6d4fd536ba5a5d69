"""APT backend implementation.

Queries package state with dpkg-query and installs/removes with apt-get.
"""

import logging

from workctl.backends.base import BackendAdapter
from workctl.core.errors import BackendError, BackendUnavailableError
from workctl.models.package import Backend
from workctl.utils.shell import CommandResult, command_exists

logger = logging.getLogger(__name__)

# Messages apt-get/dpkg print while another package manager holds the lock
_LOCK_MARKERS: tuple[str, ...] = (
    "Could not get lock",
    "dpkg frontend lock",
    "Unable to lock the administration directory",
)


def is_lock_error(output: str) -> bool:
    """Check if apt-get output reports lock contention."""
    return any(marker in output for marker in _LOCK_MARKERS)


class AptBackend(BackendAdapter):
    """Backend for APT/dpkg packages.

    Mutating commands run through ``sudo apt-get -y``. In dry-run mode
    apt-get is given ``--dry-run`` so the transaction is only simulated.

    Attributes:
        purge: If True, removal also deletes configuration files.
    """

    # Timeout for dpkg-query calls
    _QUERY_TIMEOUT: float = 30.0

    def __init__(self, dry_run: bool = False, timeout: float = 900.0, purge: bool = True) -> None:
        """Initialize the APT backend.

        Args:
            dry_run: If True, simulate apt-get transactions.
            timeout: Timeout in seconds for apt-get commands.
            purge: If True, remove packages with ``--purge``.
        """
        super().__init__(dry_run=dry_run, timeout=timeout)
        self._purge = purge

    @property
    def backend(self) -> Backend:
        """Return the primary channel."""
        return Backend.PRIMARY

    @property
    def purge(self) -> bool:
        """Check if removal purges configuration files."""
        return self._purge

    def is_available(self) -> bool:
        """Check if apt-get and dpkg-query are available."""
        return command_exists("apt-get") and command_exists("dpkg-query")

    def is_installed(self, identifier: str) -> bool:
        """Check the dpkg status of a package.

        A package counts as installed only when its status field is
        ``installed``; ``config-files`` leftovers are absent.

        Raises:
            BackendUnavailableError: If dpkg-query is missing.
        """
        if not command_exists("dpkg-query"):
            msg = "dpkg-query is not available on this system"
            raise BackendUnavailableError(msg)

        result = self._run(
            ["dpkg-query", "-W", "-f=${Status}", identifier],
            timeout=self._QUERY_TIMEOUT,
        )
        if not result.success:
            # Unknown package
            return False
        fields = result.stdout.split()
        return bool(fields) and fields[-1] == "installed"

    def _install(self, identifier: str, extra_args: tuple[str, ...]) -> None:
        logger.info("Installing apt package %s (dry_run=%s)", identifier, self.dry_run)
        self._apt_get("install", *extra_args, identifier)

    def _remove(self, identifier: str) -> None:
        logger.info(
            "Removing apt package %s (purge=%s, dry_run=%s)",
            identifier,
            self.purge,
            self.dry_run,
        )
        if self.purge:
            self._apt_get("remove", "--purge", identifier)
        else:
            self._apt_get("remove", identifier)

    def refresh(self) -> None:
        """Refresh the package index with ``apt-get update``.

        Skipped in dry-run mode.

        Raises:
            BackendError: If the update fails.
        """
        if self.dry_run:
            logger.info("Dry-run: skipping apt-get update")
            return
        logger.info("Refreshing apt package index")
        self._apt_get("update", simulate=False)

    def collect_garbage(self) -> str:
        """Remove orphaned dependencies with ``apt-get autoremove --purge``.

        Returns:
            Short summary line.

        Raises:
            BackendError: If autoremove fails.
        """
        logger.info("Running apt-get autoremove (dry_run=%s)", self.dry_run)
        result = self._apt_get("autoremove", "--purge")
        for line in result.stdout.splitlines():
            # e.g. "0 upgraded, 0 newly installed, 3 to remove and 0 not upgraded."
            if "to remove" in line:
                return f"apt: {line.strip()}"
        return "apt: autoremove completed"

    def _apt_get(self, command: str, *args: str, simulate: bool = True) -> CommandResult:
        """Run ``sudo apt-get <command> -y [args]``.

        Args:
            command: apt-get subcommand.
            *args: Additional arguments and package names.
            simulate: If True and in dry-run mode, pass ``--dry-run``.

        Returns:
            The successful CommandResult.

        Raises:
            BackendError: If apt-get fails. ``transient`` is set when the
                dpkg lock was held by another process.
        """
        cmd = ["sudo", "apt-get", command, "-y"]
        if simulate and self.dry_run:
            cmd.append("--dry-run")
        cmd.extend(args)

        result = self._run(cmd)
        if result.success:
            return result

        output = result.output
        error = result.error_message(f"apt-get {command} failed")
        summary = error.strip().splitlines()[-1]
        logger.warning("apt-get %s failed (exit %d): %s", command, result.returncode, summary)
        raise BackendError(summary, detail=output, transient=is_lock_error(output))
