"""Console output helpers.

Normal output goes to stdout; warnings, errors and interrupts go to
stderr so ``--json`` output stays parseable.
"""

import sys

from rich.console import Console

from workctl.core.theme import get_theme

# Full hex colours on a terminal, plain text everywhere else
_COLOR_SYSTEM = "truecolor" if sys.stdout.isatty() else None

console = Console(theme=get_theme(), color_system=_COLOR_SYSTEM)
err_console = Console(theme=get_theme(), stderr=True, color_system=_COLOR_SYSTEM)


def print_info(message: str) -> None:
    console.print(f"[info]{message}[/]")


def print_step(message: str) -> None:
    """Print a section heading such as ``==> Installing finance``."""
    console.print(f"\n[bold_header]==> {message}[/]")


def print_warning(message: str) -> None:
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    console.print(f"[success]{message}[/]")


def format_size(size_bytes: int) -> str:
    """Return a human-readable size such as ``1.5 KB``."""
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
