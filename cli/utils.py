"""
CLI Output Helpers
==================

Operator-facing output for run.py and the session's default notifier.
Messages carry a severity (info, success, warning, error); errors go to
stderr, everything else to stdout.
"""

import sys


SEVERITY_PREFIXES = {
    'success': "✓ ",
    'warning': "Warning: ",
    'error': "Error: ",
    'info': "",
}


def print_message(message: str, severity: str = 'info') -> None:
    """
    Print a message with its severity prefix.

    EXAMPLE:
        print_message('User "jane@contoso.com" removed from "sales@contoso.com".', 'success')
        # ✓ User "jane@contoso.com" removed from "sales@contoso.com".
    """
    stream = sys.stderr if severity == 'error' else sys.stdout
    print(f"{SEVERITY_PREFIXES.get(severity, '')}{message}", file=stream)


def print_success(message: str) -> None:
    print_message(message, 'success')


def print_error(message: str) -> None:
    print_message(message, 'error')


def print_warning(message: str) -> None:
    print_message(message, 'warning')


def print_info(message: str) -> None:
    print_message(message, 'info')


def print_header(title: str, width: int = 60) -> None:
    """Print an upper-cased title between two rules."""
    print()
    print("=" * width)
    print(title.upper())
    print("=" * width)


def print_list_item(item: str, indent: int = 0) -> None:
    """Print a bulleted line, indented two spaces per level."""
    print(f"{'  ' * indent}• {item}")
