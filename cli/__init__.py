"""
CLI Package for Mailbox Access Toolkit
======================================

This package provides the command-line interface for the Mailbox Access Toolkit.

Structure:
    cli/
    ├── __init__.py     - Main entry point (this file)
    ├── parser.py       - Argument parser definitions
    ├── session.py      - Load/edit/export session (notify + render wiring)
    └── utils.py        - Severity-prefixed output helpers

Usage:
    from cli import create_parser, MailboxSession
"""

from .parser import create_parser
from .session import MailboxSession, notify_console, render_console
from .utils import (
    print_message,
    print_header,
    print_success,
    print_error,
    print_warning,
    print_info,
    print_list_item,
)

__all__ = [
    # Parser
    'create_parser',
    # Session
    'MailboxSession',
    'notify_console',
    'render_console',
    # Output
    'print_message',
    'print_header',
    'print_success',
    'print_error',
    'print_warning',
    'print_info',
    'print_list_item',
]
