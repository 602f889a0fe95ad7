"""User-facing output for the style pre-commit hook.

Progress goes to stdout, errors and warnings to stderr.
"""

import sys
import traceback
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

RED = "\033[31m"
YELLOW = "\033[33m"
RESET = "\033[0m"


def print_error(*lines: str) -> None:
    """Print one or more lines in red on stderr."""
    for line in lines:
        print(f"{RED}{line}{RESET}", file=sys.stderr)


def print_warning(*lines: str) -> None:
    """Print one or more lines in yellow on stderr."""
    for line in lines:
        print(f"{YELLOW}Warning: {line}{RESET}", file=sys.stderr)


def print_file_list(header: str, files: Sequence[str]) -> None:
    """Print an error header followed by an indented list of files."""
    print_error(header, *(f"    {file}" for file in files))


def log_error(message: str, exception: Optional[Exception] = None) -> None:
    """Log an error with full context.

    Args:
        message: Error message.
        exception: Optional exception to log details from.
    """
    print(f"\n{'='*60}", file=sys.stderr)
    print_error(f"ERROR: {message}")
    if exception:
        print(f"Exception type: {type(exception).__name__}", file=sys.stderr)
        print(f"Exception message: {str(exception)}", file=sys.stderr)
        print("\nTraceback:", file=sys.stderr)
        traceback.print_exception(
            type(exception), exception, exception.__traceback__, file=sys.stderr
        )
    print(f"{'='*60}\n", file=sys.stderr)


class ConsoleReporter:
    """Writes decision engine progress and violation lists to the console."""

    def progress(self, *lines: str) -> None:
        for line in lines:
            print(line)

    def violations(self, header: str, files: Sequence[str], log_path: Optional[Path] = None) -> None:
        print("")
        print_file_list(header, files)
        if log_path is not None:
            print(f"Checker output written to {log_path}")
        print("")
