"""Snap backend implementation.

Executes package installation and removal using the snap CLI.
"""

import logging
import re

from workctl.backends.base import BackendAdapter
from workctl.core.errors import BackendError, BackendUnavailableError
from workctl.models.package import Backend
from workctl.utils.shell import command_exists

logger = logging.getLogger(__name__)

# snapd refuses to act while another change touches the same snap:
#   error: snap "code" has "install-snap" change in progress
_CHANGE_IN_PROGRESS = re.compile(r'has ".*" change in progress')

# Units started after snapd is installed through apt
_SNAPD_UNITS: tuple[str, ...] = ("snapd.socket", "snapd.service")


def is_change_conflict(output: str) -> bool:
    """Check if snap output reports a conflicting change in progress."""
    return _CHANGE_IN_PROGRESS.search(output) is not None


class SnapBackend(BackendAdapter):
    """Backend for Snap packages.

    Requires sudo privileges for install and remove. In dry-run mode the
    snap CLI is only queried, never asked to change anything.
    """

    bootstrap_package = "snapd"

    # Timeout for snap list calls
    _QUERY_TIMEOUT: float = 30.0

    @property
    def backend(self) -> Backend:
        """Return the secondary channel."""
        return Backend.SECONDARY

    def is_available(self) -> bool:
        """Check if the snap CLI is available."""
        return command_exists("snap")

    def is_installed(self, identifier: str) -> bool:
        """Check ``snap list <name>``; exit 0 means installed.

        Raises:
            BackendUnavailableError: If snap is missing.
        """
        if not self.is_available():
            msg = "snap is not available on this system"
            raise BackendUnavailableError(msg)

        result = self._run(["snap", "list", identifier], timeout=self._QUERY_TIMEOUT)
        return result.success

    def _install(self, identifier: str, extra_args: tuple[str, ...]) -> None:
        if self.dry_run:
            logger.info("Dry-run: would install snap %s %s", identifier, " ".join(extra_args))
            return
        logger.info("Installing snap %s", identifier)
        self._snap("install", identifier, *extra_args)

    def _remove(self, identifier: str) -> None:
        if self.dry_run:
            logger.info("Dry-run: would remove snap %s", identifier)
            return
        logger.info("Removing snap %s", identifier)
        self._snap("remove", identifier)

    def activate(self) -> None:
        """Enable the snapd units after a fresh bootstrap.

        Failures are logged; snapd may already be socket-activated.
        """
        if self.dry_run or not command_exists("systemctl"):
            return
        for unit in _SNAPD_UNITS:
            try:
                result = self._run(["sudo", "systemctl", "enable", "--now", unit], timeout=60.0)
            except (BackendError, BackendUnavailableError) as e:
                logger.warning("Could not enable %s: %s", unit, e)
                continue
            if not result.success:
                logger.warning(
                    "Could not enable %s: %s", unit, result.error_message("systemctl failed")
                )

    def _snap(self, command: str, *args: str) -> None:
        """Run ``sudo snap <command> [args]``.

        Raises:
            BackendError: If snap fails. ``transient`` is set when another
                change on the same snap was in progress.
        """
        result = self._run(["sudo", "snap", command, *args])
        if result.success:
            return

        output = result.output
        summary = result.error_message(f"snap {command} failed").splitlines()[-1]
        logger.warning("snap %s failed (exit %d): %s", command, result.returncode, summary)
        raise BackendError(summary, detail=output, transient=is_change_conflict(output))
