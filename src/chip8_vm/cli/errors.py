"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes across all CLI tools.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    RUNTIME_ERROR = 1    # Program failed to load or stopped on an execution error
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Unified exception handler for all CLI tools.

    Formats the error message appropriately, optionally prints traceback
    in verbose mode, and exits with the correct exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Load")

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from chip8_vm.errors import Chip8Error

    if isinstance(error, Chip8Error):
        # Program loading or execution errors
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.RUNTIME_ERROR)

    elif isinstance(error, (click.BadParameter, ValueError)):
        # Invalid command-line arguments (bad key names, scales, seeds)
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, (FileNotFoundError, PermissionError)):
        # Missing or unreadable input files
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        # Unexpected internal error
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
