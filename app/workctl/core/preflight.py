"""Host preflight checks.

Run before any mutating command: workctl only targets Debian-family
systems with apt, dpkg and sudo.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from workctl.core.errors import PreconditionError
from workctl.utils.shell import command_exists

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = Path("/etc/os-release")

# Tools that must be on PATH for any install or removal
REQUIRED_COMMANDS: tuple[str, ...] = ("apt-get", "dpkg-query", "sudo")

_SESSION_VARIABLES: tuple[str, ...] = ("DISPLAY", "WAYLAND_DISPLAY", "XDG_CURRENT_DESKTOP")


@dataclass(frozen=True, slots=True)
class HostInfo:
    """Facts about the host gathered during preflight.

    Attributes:
        distro_id: ``ID`` from os-release (e.g. "ubuntu").
        name: ``PRETTY_NAME`` or ``NAME`` from os-release.
        version_id: ``VERSION_ID`` from os-release, if any.
        graphical_session: Whether a desktop session was detected.
    """

    distro_id: str
    name: str
    version_id: str | None
    graphical_session: bool


def parse_os_release(text: str) -> dict[str, str]:
    """Parse os-release ``KEY=value`` lines, dropping quotes and comments."""
    fields: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        fields[key.strip()] = value.strip().strip("\"'")
    return fields


def has_graphical_session(environ: dict[str, str] | None = None) -> bool:
    """Check the environment for a desktop session."""
    env = os.environ if environ is None else environ
    return any(env.get(var) for var in _SESSION_VARIABLES)


def check_host(os_release: Path = OS_RELEASE_PATH) -> HostInfo:
    """Verify the host can run workctl.

    Args:
        os_release: Path to the os-release file.

    Returns:
        HostInfo describing the host.

    Raises:
        PreconditionError: If the host is not Debian-family or a required
            command is missing.
    """
    try:
        fields = parse_os_release(os_release.read_text(encoding="utf-8"))
    except OSError as e:
        msg = f"Cannot detect distribution: {os_release} is not readable"
        raise PreconditionError(msg) from e

    distro_id = fields.get("ID", "unknown").lower()
    family = {distro_id, *fields.get("ID_LIKE", "").lower().split()}
    if "debian" not in family:
        msg = f"Unsupported distribution '{distro_id}': a Debian-based system is required"
        raise PreconditionError(msg)

    missing = [cmd for cmd in REQUIRED_COMMANDS if not command_exists(cmd)]
    if missing:
        raise PreconditionError(f"Missing required commands: {', '.join(missing)}")

    graphical = has_graphical_session()
    if not graphical:
        logger.warning("No graphical session detected; desktop applications may not start")

    info = HostInfo(
        distro_id=distro_id,
        name=fields.get("PRETTY_NAME") or fields.get("NAME") or distro_id,
        version_id=fields.get("VERSION_ID"),
        graphical_session=graphical,
    )
    logger.info("Detected %s (id=%s, version=%s)", info.name, info.distro_id, info.version_id)
    return info
