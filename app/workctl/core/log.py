"""Logging setup for CLI runs.

Each tool mode writes an append-only text log under
~/.local/state/workctl/logs/<mode>.log. Backend output is logged at
DEBUG level and never printed unless ``--verbose`` mirrors the log to
stderr.
"""

import logging
from pathlib import Path

from rich.logging import RichHandler

from workctl.core.paths import ensure_log_dir, get_log_path
from workctl.utils.formatting import err_console

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attribute set on handlers installed by configure_logging
_MARKER = "_workctl_handler"


def _installed(root: logging.Logger) -> list[logging.Handler]:
    return [h for h in root.handlers if getattr(h, _MARKER, None) is not None]


def configure_logging(mode: str, verbose: bool = False) -> Path | None:
    """Attach the file log for a mode and, optionally, a stderr mirror.

    Calling it again for the same mode is a no-op. If the log directory
    cannot be created, file logging is disabled and a warning is emitted
    on stderr.

    Args:
        mode: Tool mode ("install", "verify", "uninstall", ...).
        verbose: Mirror log records to stderr through Rich.

    Returns:
        Path of the log file, or None if file logging is unavailable.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    markers = {getattr(h, _MARKER) for h in _installed(root)}
    log_path: Path | None = get_log_path(mode)

    if f"file:{mode}" not in markers:
        try:
            ensure_log_dir()
            file_handler = logging.FileHandler(get_log_path(mode), encoding="utf-8")
        except (RuntimeError, OSError) as e:
            err_console.print(f"[warning]Warning:[/] file logging disabled: {e}")
            log_path = None
        else:
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
            file_handler.setLevel(logging.DEBUG)
            setattr(file_handler, _MARKER, f"file:{mode}")
            root.addHandler(file_handler)

    if verbose and "console" not in markers:
        console_handler = RichHandler(console=err_console, show_path=False, markup=False)
        console_handler.setLevel(logging.DEBUG)
        setattr(console_handler, _MARKER, "console")
        root.addHandler(console_handler)

    return log_path


def reset_logging() -> None:
    """Detach and close every handler installed by configure_logging."""
    root = logging.getLogger()
    for handler in _installed(root):
        root.removeHandler(handler)
        handler.close()
