"""Exception taxonomy for workctl.

- BackendUnavailableError: a backend's tool is missing. Fatal for that
  backend's items only.
- BackendError: a backend operation failed. Recorded, the batch continues.
- PreconditionError: unsupported host or missing required tool. Raised
  before any mutation.
- UserAbortedError: the user declined a confirmation. Clean exit.
- BackupError: an archive could not be written. The group is skipped.
"""


class WorkctlError(Exception):
    """Base exception for all workctl errors."""


class BackendError(WorkctlError):
    """Raised when a backend install/remove/query operation fails.

    Attributes:
        detail: Full backend output, written to the log only.
        transient: True when the failure is worth retrying (lock contention).
    """

    def __init__(self, message: str, *, detail: str = "", transient: bool = False) -> None:
        super().__init__(message)
        self.detail = detail
        self.transient = transient


class BackendUnavailableError(WorkctlError):
    """Raised when a backend's query or install tool is not on PATH."""


class PreconditionError(WorkctlError):
    """Raised when the host cannot run workctl at all."""


class UserAbortedError(WorkctlError):
    """Raised when the user declines a destructive operation."""


class BackupError(WorkctlError):
    """Raised when a backup archive cannot be written."""
