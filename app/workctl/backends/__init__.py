"""Installation backends for executing install and remove actions.

This module provides the abstract adapter and the concrete APT and Snap
implementations.
"""

from workctl.backends.apt import AptBackend
from workctl.backends.base import BackendAdapter
from workctl.backends.snap import SnapBackend
from workctl.models.package import Backend


def get_backends(
    *,
    dry_run: bool = False,
    timeout: float = 900.0,
    purge: bool = True,
) -> dict[Backend, BackendAdapter]:
    """Create one adapter per channel.

    Args:
        dry_run: Passed to every adapter.
        timeout: Timeout for mutating commands.
        purge: Whether APT removal purges configuration files.

    Returns:
        Mapping from channel to adapter.
    """
    return {
        Backend.PRIMARY: AptBackend(dry_run=dry_run, timeout=timeout, purge=purge),
        Backend.SECONDARY: SnapBackend(dry_run=dry_run, timeout=timeout),
    }


__all__ = ["BackendAdapter", "AptBackend", "SnapBackend", "get_backends"]
