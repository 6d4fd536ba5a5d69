"""Utility modules for workctl.

This module exports commonly used utility functions.
"""

from workctl.utils.formatting import (
    console,
    err_console,
    format_size,
    print_error,
    print_info,
    print_step,
    print_success,
    print_warning,
)
from workctl.utils.shell import CommandResult, command_exists, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "format_size",
    "print_error",
    "print_info",
    "print_step",
    "print_success",
    "print_warning",
    "run_command",
]
