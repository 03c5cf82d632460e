"""Utility functions for ragamuffin."""

from ragamuffin.utils.console import (
    console,
    error_console,
    print_error,
    print_header,
    print_info,
    print_panel,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "error_console",
    "print_error",
    "print_header",
    "print_info",
    "print_panel",
    "print_success",
    "print_warning",
]
