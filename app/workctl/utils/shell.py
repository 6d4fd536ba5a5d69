"""Subprocess helpers for the package backends.

Package managers always run with a C locale and without debconf prompts,
so their messages can be matched and they never block on a question.
"""

import os
import shutil
import subprocess
from dataclasses import dataclass

_NONINTERACTIVE_ENV: dict[str, str] = {
    "LC_ALL": "C",
    "DEBIAN_FRONTEND": "noninteractive",
}


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of one process run."""

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Both streams stripped and joined, for the log."""
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)

    def error_message(self, fallback: str) -> str:
        """stderr if the process wrote any, else stdout, else ``fallback``."""
        return self.stderr.strip() or self.stdout.strip() or fallback


def run_command(
    args: list[str],
    *,
    timeout: float | None = 60.0,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Run a command to completion and capture its output.

    stdin stays attached to the terminal so ``sudo`` can ask for a
    password.

    Args:
        args: Command and arguments.
        timeout: Seconds before the process is killed, or None to wait forever.
        env: Variables merged over the current and non-interactive environment.

    Raises:
        subprocess.TimeoutExpired: If the command exceeds ``timeout``.
        FileNotFoundError: If the executable does not exist.
    """
    completed = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=False,
        timeout=timeout,
        env={**os.environ, **_NONINTERACTIVE_ENV, **(env or {})},
    )
    return CommandResult(completed.stdout, completed.stderr, completed.returncode)


def command_exists(name: str) -> bool:
    """Check whether ``name`` resolves on PATH."""
    return shutil.which(name) is not None
