"""Log commands for reading the per-mode text logs.

Every install, verify and uninstall run appends to its own log file,
including the full backend output that is never shown on the terminal.
"""

from collections import deque
from typing import Annotated

import typer

from workctl.core.paths import get_log_path
from workctl.utils.formatting import console, print_info

app = typer.Typer(
    name="log",
    help="View the installation, verification or removal log.",
    no_args_is_help=True,
)

LinesOption = Annotated[
    int,
    typer.Option(
        "--lines",
        "-n",
        min=1,
        help="Number of trailing lines to show.",
    ),
]

PathOption = Annotated[
    bool,
    typer.Option(
        "--path",
        help="Print the log file path and exit.",
    ),
]


def _show(mode: str, lines: int, path_only: bool) -> None:
    log_path = get_log_path(mode)
    if path_only:
        console.print(str(log_path), markup=False, highlight=False, soft_wrap=True)
        return
    if not log_path.exists():
        print_info(f"No {mode} log yet. Run 'workctl {mode}' first.")
        return

    with log_path.open(encoding="utf-8", errors="replace") as f:
        tail = deque(f, maxlen=lines)

    console.print(f"[muted]{log_path}[/muted]", highlight=False, soft_wrap=True)
    for line in tail:
        console.print(line.rstrip("\n"), markup=False, highlight=False, soft_wrap=True)


@app.command("install")
def install_log(lines: LinesOption = 50, path_only: PathOption = False) -> None:
    """Show the end of the installation log."""
    _show("install", lines, path_only)


@app.command("verify")
def verify_log(lines: LinesOption = 50, path_only: PathOption = False) -> None:
    """Show the end of the verification log."""
    _show("verify", lines, path_only)


@app.command("uninstall")
def uninstall_log(lines: LinesOption = 50, path_only: PathOption = False) -> None:
    """Show the end of the removal log."""
    _show("uninstall", lines, path_only)
