"""Single-instance lock for mutating runs."""

import contextlib
import fcntl
import logging
import os
from collections.abc import Iterator
from pathlib import Path

from workctl.core.errors import PreconditionError
from workctl.core.paths import get_lock_path

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def instance_lock(path: Path | None = None) -> Iterator[Path]:
    """Hold an exclusive, non-blocking flock for the duration of a run.

    The lock file records the holder's PID for diagnostics; the lock
    itself is released by the kernel when the process exits.

    Args:
        path: Lock file path. Default: ~/.local/state/workctl/workctl.lock

    Yields:
        Path of the held lock file.

    Raises:
        PreconditionError: If another workctl process holds the lock.
    """
    lock_path = path or get_lock_path()
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    with lock_path.open("a+", encoding="utf-8") as lf:
        try:
            fcntl.flock(lf.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as e:
            lf.seek(0)
            holder = lf.read().strip() or "unknown"
            msg = f"Another workctl run is in progress (pid {holder}, lock {lock_path})"
            raise PreconditionError(msg) from e

        lf.seek(0)
        lf.truncate()
        lf.write(str(os.getpid()))
        lf.flush()
        logger.debug("Acquired lock %s", lock_path)
        try:
            yield lock_path
        finally:
            fcntl.flock(lf.fileno(), fcntl.LOCK_UN)
            logger.debug("Released lock %s", lock_path)
