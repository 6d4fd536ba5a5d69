"""Installation backend identifiers."""

from enum import Enum


class Backend(str, Enum):
    """Installation channel an item is delivered through.

    Attributes:
        PRIMARY: The system package manager (APT).
        SECONDARY: The secondary distribution channel (Snap).
    """

    PRIMARY = "primary"
    SECONDARY = "secondary"

    @property
    def label(self) -> str:
        """Short channel name used in tables and logs."""
        return _LABELS[self]


_LABELS: dict[Backend, str] = {
    Backend.PRIMARY: "apt",
    Backend.SECONDARY: "snap",
}
